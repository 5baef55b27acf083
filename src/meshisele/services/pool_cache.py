"""Short-lived storage for filtered candidate pools."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from meshisele.domain.candidates import Candidate
from meshisele.domain.criteria import FilterCriteria


@dataclass(frozen=True)
class DecisionPool:
    """Filtered candidates kept around so "try again" can re-pick from them."""

    session_id: str
    criteria: FilterCriteria
    candidates: tuple[Candidate, ...]
    rerun_count: int = 0


class PoolCache(Protocol):
    """Cache interface for decision pools keyed by session id."""

    def get(self, session_id: str) -> DecisionPool | None:
        """Return a pool if present and not expired."""

    def put(self, pool: DecisionPool, ttl_seconds: int) -> None:
        """Store a pool with a TTL in seconds."""


@dataclass
class _PoolEntry:
    pool: DecisionPool
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryPoolCache(PoolCache):
    """Process-local pool cache."""

    clock: Callable[[], datetime] = _utcnow
    _entries: dict[str, _PoolEntry] = field(default_factory=dict)

    def get(self, session_id: str) -> DecisionPool | None:
        """Return a pool if it hasn't expired."""
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(session_id, None)
            return None
        return entry.pool

    def put(self, pool: DecisionPool, ttl_seconds: int) -> None:
        """Store a pool, replacing any earlier pool for the same session."""
        now = self.clock()
        self._purge_expired(now)
        expires_at = now + timedelta(seconds=ttl_seconds)
        self._entries[pool.session_id] = _PoolEntry(pool=pool, expires_at=expires_at)

    def _purge_expired(self, now: datetime) -> None:
        expired = [
            session_id
            for session_id, entry in self._entries.items()
            if now >= entry.expires_at
        ]
        for session_id in expired:
            del self._entries[session_id]
