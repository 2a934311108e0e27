"""Persistence layer — attempt store, audit log and state snapshot."""

from chasedesk.persistence.attempt_store import InMemoryAttemptStore
from chasedesk.persistence.audit_log import AuditLog
from chasedesk.persistence.state_store import StateStore

__all__ = ["InMemoryAttemptStore", "AuditLog", "StateStore"]
