"""Engine module — status state machine, audit synthesis, mutation planning."""

from chasedesk.engine.audit import AuditSynthesizer
from chasedesk.engine.mutation import AttemptUpdate, MutationEngine
from chasedesk.engine.state_machine import (
    AttemptStateMachine,
    is_valid_transition,
    status_from_outcome,
)

__all__ = [
    "AuditSynthesizer",
    "AttemptUpdate",
    "MutationEngine",
    "AttemptStateMachine",
    "is_valid_transition",
    "status_from_outcome",
]
