"""Append-only audit log — every committed field change, keyed by attempt.

Attempts carry their own audit tail; this log is the cross-attempt arena
of the same entries. Entries are immutable once written. Each record is
hashed at append time so a JSONL file can be verified on recovery.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Optional

from chasedesk.models.attempt import AuditEntry, AuditField
from chasedesk.persistence.state_store import audit_entry_from_dict, audit_entry_to_dict

logger = logging.getLogger(__name__)


def entry_hash(record: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of a serialised entry."""
    canonical = json.dumps(record, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


class AuditLog:
    """Append-only audit log with optional file persistence.

    Entries can only be appended, never modified or deleted.
    The log can be persisted to a JSONL file (one JSON object per line)
    and loaded back for recovery.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._entries: list[AuditEntry] = []
        self._by_attempt: dict[str, list[AuditEntry]] = {}
        self._entry_ids: set[str] = set()
        self._storage_path = storage_path

        if storage_path and storage_path.exists():
            self._load_from_file(storage_path)

    def append(self, entry: AuditEntry) -> None:
        """Append an entry to the log.

        Raises ValueError if the entry id is a duplicate (replay protection).
        """
        if entry.id in self._entry_ids:
            raise ValueError(f"Duplicate audit entry ID: {entry.id}")

        if self._storage_path:
            self._append_to_file(entry)
        self._index(entry)

    def extend(self, entries: list[AuditEntry]) -> None:
        for entry in entries:
            self.append(entry)

    def entries(
        self,
        attempt_id: Optional[str] = None,
        field: Optional[AuditField] = None,
    ) -> list[AuditEntry]:
        """Return entries, optionally narrowed to one attempt and/or field."""
        if attempt_id is None:
            result = list(self._entries)
        else:
            result = list(self._by_attempt.get(attempt_id, []))
        if field is not None:
            result = [e for e in result if e.field == field]
        return result

    def attempt_ids(self) -> list[str]:
        return list(self._by_attempt)

    @property
    def count(self) -> int:
        return len(self._entries)

    @property
    def last_entry(self) -> Optional[AuditEntry]:
        return self._entries[-1] if self._entries else None

    def _index(self, entry: AuditEntry) -> None:
        self._entries.append(entry)
        self._by_attempt.setdefault(entry.attempt_id, []).append(entry)
        self._entry_ids.add(entry.id)

    def _append_to_file(self, entry: AuditEntry) -> None:
        """Append a single entry to the JSONL file."""
        record = audit_entry_to_dict(entry)
        record["entry_hash"] = entry_hash(audit_entry_to_dict(entry))
        with self._storage_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, sort_keys=True, ensure_ascii=False) + "\n")

    def _load_from_file(self, path: Path) -> None:
        """Load entries from a JSONL file with integrity verification.

        Fail-closed: rejects tampered records (hash mismatch) and
        duplicate entry IDs.
        """
        with path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)
                stored_hash = data.pop("entry_hash", None)

                entry_id = data["id"]
                if entry_id in self._entry_ids:
                    raise ValueError(
                        f"Duplicate audit entry ID on recovery (line {line_num}): {entry_id}"
                    )

                expected_hash = entry_hash(data)
                if stored_hash != expected_hash:
                    raise ValueError(
                        f"Integrity check failed (line {line_num}): entry {entry_id} "
                        f"stored hash {stored_hash} != computed {expected_hash}"
                    )

                self._index(audit_entry_from_dict(data))

        logger.debug("Recovered %d audit entries from %s", self.count, path)
