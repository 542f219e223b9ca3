from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from portfolio_dashboard.models.holding import Holding
from portfolio_dashboard.models.schemas import LoadStatus
from portfolio_dashboard.utils.time import utc_now


class InvalidStateTransition(RuntimeError):
    pass


@dataclass(frozen=True)
class DashboardSnapshot:
    holdings: tuple[Holding, ...]
    status: LoadStatus
    reason: str | None = None
    last_updated: datetime | None = None


class DashboardState:
    """Current holdings plus the status of the load cycle that produced them.

    A load cycle moves LOADING -> READY or LOADING -> FAILED. Holdings are
    replaced wholesale on completion and cleared on failure. Readers get an
    immutable snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = DashboardSnapshot(holdings=(), status=LoadStatus.LOADING)
        self._in_flight = False

    def snapshot(self) -> DashboardSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    def begin_load(self) -> bool:
        """Start a load cycle. Returns False when one is already running."""
        with self._lock:
            if self._in_flight:
                return False
            self._in_flight = True
            self._snapshot = DashboardSnapshot(
                holdings=(),
                status=LoadStatus.LOADING,
                last_updated=self._snapshot.last_updated,
            )
            return True

    def complete(self, holdings: Iterable[Holding], timestamp: datetime | None = None) -> DashboardSnapshot:
        with self._lock:
            if not self._in_flight:
                raise InvalidStateTransition("Cannot complete a load that was never started")
            self._in_flight = False
            self._snapshot = DashboardSnapshot(
                holdings=tuple(holdings),
                status=LoadStatus.READY,
                last_updated=timestamp or utc_now(),
            )
            return self._snapshot

    def fail(self, reason: str, timestamp: datetime | None = None) -> DashboardSnapshot:
        with self._lock:
            if not self._in_flight:
                raise InvalidStateTransition("Cannot fail a load that was never started")
            self._in_flight = False
            self._snapshot = DashboardSnapshot(
                holdings=(),
                status=LoadStatus.FAILED,
                reason=reason,
                last_updated=timestamp or utc_now(),
            )
            return self._snapshot
