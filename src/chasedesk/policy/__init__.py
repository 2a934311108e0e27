"""Desk policy configuration."""
