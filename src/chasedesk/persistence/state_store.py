"""State store — JSON-based snapshot of the attempt collection.

Stores and recovers every attempt with its full audit history.

This is a simple file-based store suitable for single-node use.
Production deployments would replace this with a database backend
while keeping the same interface.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from chasedesk.models.attempt import (
    AuditEntry,
    AuditField,
    RetrievalAttempt,
    RetrievalMethod,
    Status,
)

_TS_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_ts(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime(_TS_FORMAT)


def parse_ts(raw: str) -> datetime:
    return datetime.strptime(raw, _TS_FORMAT).replace(tzinfo=timezone.utc)


def audit_entry_to_dict(entry: AuditEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "attempt_id": entry.attempt_id,
        "field": entry.field.value,
        "from": entry.from_value,
        "to": entry.to_value,
        "user": entry.user,
        "reason": entry.reason,
        "timestamp": format_ts(entry.timestamp),
    }


def audit_entry_from_dict(data: dict[str, Any]) -> AuditEntry:
    return AuditEntry(
        id=data["id"],
        attempt_id=data["attempt_id"],
        field=AuditField(data["field"]),
        from_value=data["from"],
        to_value=data["to"],
        user=data["user"],
        reason=data.get("reason"),
        timestamp=parse_ts(data["timestamp"]),
    )


def attempt_to_dict(attempt: RetrievalAttempt) -> dict[str, Any]:
    return {
        "id": attempt.id,
        "retrieval_method": attempt.retrieval_method.value,
        "client_name": attempt.client_name,
        "demand_id": attempt.demand_id,
        "provider_name": attempt.provider_name,
        "provider_npi": attempt.provider_npi,
        "provider_group": attempt.provider_group,
        "start_address": attempt.start_address,
        "chase_address": attempt.chase_address,
        "status": attempt.status.value,
        "last_action_at": format_ts(attempt.last_action_at),
        "phone": attempt.phone,
        "fax": attempt.fax,
        "email": attempt.email,
        "contact_name": attempt.contact_name,
        "research_agent": attempt.research_agent,
        "version": attempt.version,
        "audit": [audit_entry_to_dict(e) for e in attempt.audit],
    }


def attempt_from_dict(data: dict[str, Any]) -> RetrievalAttempt:
    return RetrievalAttempt(
        id=data["id"],
        retrieval_method=RetrievalMethod(data["retrieval_method"]),
        client_name=data["client_name"],
        demand_id=data["demand_id"],
        provider_name=data["provider_name"],
        provider_npi=data["provider_npi"],
        provider_group=data["provider_group"],
        start_address=data["start_address"],
        chase_address=data["chase_address"],
        status=Status(data["status"]),
        last_action_at=parse_ts(data["last_action_at"]),
        phone=data.get("phone"),
        fax=data.get("fax"),
        email=data.get("email"),
        contact_name=data.get("contact_name"),
        research_agent=data.get("research_agent"),
        version=data["version"],
        audit=[audit_entry_from_dict(e) for e in data.get("audit", [])],
    )


class StateStore:
    """JSON file-based snapshot persistence.

    Usage:
        store = StateStore(Path("data/desk_state.json"))
        store.save_attempts(attempts)

        # On recovery:
        attempts = store.load_attempts()
    """

    def __init__(self, storage_path: Path) -> None:
        self._path = storage_path
        self._state: dict[str, Any] = {}
        if storage_path.exists():
            self._load()

    def _load(self) -> None:
        with self._path.open("r", encoding="utf-8") as f:
            self._state = json.load(f)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as f:
            json.dump(self._state, f, indent=2, sort_keys=True, ensure_ascii=False)

    def save_attempts(self, attempts: dict[str, RetrievalAttempt]) -> None:
        """Serialize every attempt, keyed by id."""
        self._state["attempts"] = {
            attempt_id: attempt_to_dict(a) for attempt_id, a in attempts.items()
        }
        self._state["saved_utc"] = format_ts(datetime.now(timezone.utc))
        self._save()

    def load_attempts(self) -> dict[str, RetrievalAttempt]:
        return {
            attempt_id: attempt_from_dict(data)
            for attempt_id, data in self._state.get("attempts", {}).items()
        }

    @property
    def saved_utc(self) -> Optional[str]:
        return self._state.get("saved_utc")
