"""Tests for the policy resolver — proves config loads and fails loud."""

import json
from pathlib import Path

import pytest

from chasedesk.policy.resolver import PolicyResolver, StoreSimulation

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


def _load_policy() -> dict:
    with (CONFIG_DIR / "desk_policy.json").open("r", encoding="utf-8") as f:
        return json.load(f)


class TestPolicyResolver:
    def test_loads_canonical_config(self) -> None:
        resolver = PolicyResolver.from_config_dir(CONFIG_DIR)
        assert resolver.version == "1.0.0"
        assert resolver.address_min_length() == 5
        assert resolver.default_user() == "current_user"
        assert resolver.sla_days() == 3
        assert resolver.store_simulation() == StoreSimulation(0.5, 1.5, 0.1)

    def test_outcome_messages_are_copies(self) -> None:
        resolver = PolicyResolver.from_config_dir(CONFIG_DIR)
        messages = resolver.outcome_messages()
        messages["fallback"] = "changed"
        assert resolver.outcome_messages()["fallback"] == "Status updated"

    def test_missing_config_dir_fails(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            PolicyResolver.from_config_dir(tmp_path)

    def test_missing_version_fails(self) -> None:
        policy = _load_policy()
        del policy["version"]
        with pytest.raises(ValueError, match="missing version"):
            PolicyResolver(policy)

    def test_missing_outcome_message_fails(self) -> None:
        policy = _load_policy()
        del policy["audit"]["outcome_messages"]["research_failed"]
        with pytest.raises(ValueError, match="research_failed"):
            PolicyResolver(policy)

    def test_failure_rate_out_of_range_fails(self) -> None:
        policy = _load_policy()
        policy["store_simulation"]["failure_rate"] = 1.5
        with pytest.raises(ValueError, match="failure_rate"):
            PolicyResolver(policy)

    def test_missing_section_fails_loud(self) -> None:
        policy = _load_policy()
        del policy["aging"]
        resolver = PolicyResolver(policy)
        with pytest.raises(KeyError):
            resolver.sla_days()
