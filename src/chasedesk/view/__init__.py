"""Derived view — filter evaluator, sort comparator, pipeline."""

from chasedesk.view.filtering import filter_attempts
from chasedesk.view.pipeline import DerivedView, derive_view
from chasedesk.view.sorting import sort_attempts

__all__ = ["filter_attempts", "sort_attempts", "DerivedView", "derive_view"]
