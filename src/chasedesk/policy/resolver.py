"""Policy resolver — loads desk_policy.json and exposes every runtime
decision as a typed method call.

No magic. No defaults. If a value is missing from the config, it fails loud.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class StoreSimulation:
    """Simulated backend behaviour for the in-memory store."""
    min_latency_seconds: float
    max_latency_seconds: float
    failure_rate: float


class PolicyResolver:
    """Loads and resolves desk policy.

    Usage:
        resolver = PolicyResolver.from_config_dir(Path("config"))
        min_len = resolver.address_min_length()
        messages = resolver.outcome_messages()
    """

    def __init__(self, policy: dict[str, Any]) -> None:
        self._policy = policy
        self._validate()

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load from the canonical config directory."""
        return cls(_load_json(config_dir / "desk_policy.json"))

    def _validate(self) -> None:
        if "version" not in self._policy:
            raise ValueError("desk_policy.json missing version")
        messages = self._policy["audit"]["outcome_messages"]
        for key in ("research_completed", "research_failed", "fallback"):
            if key not in messages:
                raise ValueError(f"desk_policy.json missing outcome message: {key}")
        rate = self._policy["store_simulation"]["failure_rate"]
        if not (0.0 <= rate <= 1.0):
            raise ValueError(f"failure_rate must be in [0, 1], got {rate}")

    @property
    def version(self) -> str:
        return self._policy["version"]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def address_min_length(self) -> int:
        """Minimum stripped length for a chase address."""
        return self._policy["validation"]["address_min_length"]

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def default_user(self) -> str:
        """User recorded on audit entries when the caller supplies none."""
        return self._policy["audit"]["default_user"]

    def outcome_messages(self) -> dict[str, str]:
        """Return status-entry messages keyed by outcome, plus "fallback"."""
        return dict(self._policy["audit"]["outcome_messages"])

    # ------------------------------------------------------------------
    # Aging
    # ------------------------------------------------------------------

    def sla_days(self) -> int:
        """Days in research before an attempt counts as overdue."""
        return self._policy["aging"]["sla_days"]

    # ------------------------------------------------------------------
    # Store simulation
    # ------------------------------------------------------------------

    def store_simulation(self) -> StoreSimulation:
        sim = self._policy["store_simulation"]
        return StoreSimulation(
            min_latency_seconds=sim["min_latency_seconds"],
            max_latency_seconds=sim["max_latency_seconds"],
            failure_rate=sim["failure_rate"],
        )


def _load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file or raise with clear path."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)
