"""In-memory attempt store with version-stamped compare-and-swap writes.

Stands in for the external data source. The store holds whole attempts
keyed by id and replaces them wholesale, so a reader sees either the
old attempt or the new one, never a mix.

Concurrency model:
- Writes are serialised by an asyncio.Lock.
- A write names the version it was planned against; if the stored
  version moved on, the write is rejected with StaleVersion.
- Reads and writes copy attempts in and out; callers never hold a
  reference into the store.

An optional simulated backend adds latency and random failures before
any write is attempted, so callers can exercise their retry policy.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import random
from typing import Iterable, Optional

from chasedesk.errors import NotFound, StaleVersion, TransientFailure
from chasedesk.models.attempt import RetrievalAttempt
from chasedesk.persistence.state_store import StateStore
from chasedesk.policy.resolver import StoreSimulation

logger = logging.getLogger(__name__)


class InMemoryAttemptStore:
    """Async attempt collection reachable by id.

    Usage:
        store = InMemoryAttemptStore(seed_attempts)
        attempt = await store.get("a1b2...")
        await store.compare_and_swap(updated, expected_version=attempt.version)

    Persistence (optional):
        store = InMemoryAttemptStore(state_store=StateStore(path))
        # Snapshot is loaded on construction and saved after every write.
    """

    def __init__(
        self,
        attempts: Iterable[RetrievalAttempt] = (),
        simulation: Optional[StoreSimulation] = None,
        rng: Optional[random.Random] = None,
        state_store: Optional[StateStore] = None,
    ) -> None:
        self._attempts: dict[str, RetrievalAttempt] = {}
        self._simulation = simulation
        self._rng = rng or random.Random()
        self._state_store = state_store
        self._lock = asyncio.Lock()

        restored: set[str] = set()
        if state_store is not None:
            self._attempts.update(state_store.load_attempts())
            restored = set(self._attempts)
        # Seeds already in the snapshot defer to its newer copy.
        for attempt in attempts:
            if attempt.id not in restored:
                self._register(attempt)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, attempt_id: str) -> RetrievalAttempt:
        """Return a copy of the attempt. Raises NotFound."""
        attempt = self._attempts.get(attempt_id)
        if attempt is None:
            raise NotFound(attempt_id)
        return copy.deepcopy(attempt)

    async def list_attempts(self) -> list[RetrievalAttempt]:
        """Return copies of every attempt in insertion order."""
        return [copy.deepcopy(a) for a in self._attempts.values()]

    @property
    def count(self) -> int:
        return len(self._attempts)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, attempt: RetrievalAttempt) -> None:
        """Insert a new attempt created outside the core."""
        async with self._lock:
            self._register(attempt)
            self._persist(rollback={attempt.id: None})

    async def compare_and_swap(
        self,
        updated: RetrievalAttempt,
        expected_version: int,
    ) -> None:
        """Replace one attempt if its stored version is still expected_version.

        Raises:
            NotFound: the attempt vanished.
            StaleVersion: another write landed first.
            TransientFailure: simulated backend or snapshot failure.
        """
        await self.compare_and_swap_many([(updated, expected_version)])

    async def compare_and_swap_many(
        self,
        updates: list[tuple[RetrievalAttempt, int]],
    ) -> None:
        """Replace several attempts, all or nothing.

        Every expected version is checked before anything is written.
        """
        await self._simulate()
        async with self._lock:
            for updated, expected_version in updates:
                self._check_version(updated, expected_version)

            previous = {u.id: self._attempts[u.id] for u, _ in updates}
            for updated, _ in updates:
                self._attempts[updated.id] = copy.deepcopy(updated)
            self._persist(rollback=previous)

        logger.debug("Committed %d attempt update(s)", len(updates))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _register(self, attempt: RetrievalAttempt) -> None:
        if not attempt.id.strip():
            raise ValueError("Cannot add attempt with blank ID")
        if attempt.id in self._attempts:
            raise ValueError(f"Duplicate attempt ID: {attempt.id}")
        if attempt.version < 1:
            raise ValueError(f"Attempt version must start at 1, got {attempt.version}")
        if attempt.last_action_at.tzinfo is None:
            raise ValueError(f"Attempt {attempt.id}: last_action_at must be timezone-aware")
        self._attempts[attempt.id] = copy.deepcopy(attempt)

    def _check_version(self, updated: RetrievalAttempt, expected_version: int) -> None:
        stored = self._attempts.get(updated.id)
        if stored is None:
            raise NotFound(updated.id)
        if stored.version != expected_version:
            raise StaleVersion(updated.id, expected_version, stored.version)
        if updated.version != expected_version + 1:
            raise ValueError(
                f"Attempt {updated.id}: new version must be {expected_version + 1}, "
                f"got {updated.version}"
            )

    async def _simulate(self) -> None:
        sim = self._simulation
        if sim is None:
            return
        if sim.max_latency_seconds > 0:
            await asyncio.sleep(
                self._rng.uniform(sim.min_latency_seconds, sim.max_latency_seconds)
            )
        if self._rng.random() < sim.failure_rate:
            raise TransientFailure("Backend unavailable. Please try again.")

    def _persist(self, rollback: dict[str, Optional[RetrievalAttempt]]) -> None:
        """Save the snapshot; on failure restore the prior in-memory state.

        rollback maps attempt id to its previous value (None = newly added).
        """
        if self._state_store is None:
            return
        try:
            self._state_store.save_attempts(self._attempts)
        except OSError as e:
            for attempt_id, prior in rollback.items():
                if prior is None:
                    self._attempts.pop(attempt_id, None)
                else:
                    self._attempts[attempt_id] = prior
            logger.warning("Snapshot write failed, rolled back: %s", e)
            raise TransientFailure(f"Persistence failure: {e}") from e
