from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .exceptions import InvalidTransitionError


class UnitStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


class Reason(str, Enum):
    RUN_ERROR = "run error"
    ANCESTOR_ERROR = "ancestor error"
    EARLY_EXIT = "early exit"
    INTERRUPTED = "interrupted"
    EXCLUDED = "excluded"
    EXCLUDED_ANCESTOR = "excluded ancestor"


_TERMINAL = frozenset({UnitStatus.SUCCEEDED, UnitStatus.FAILED, UnitStatus.SKIPPED})

_TRANSITIONS: dict[UnitStatus, frozenset[UnitStatus]] = {
    UnitStatus.PENDING: frozenset({UnitStatus.READY, UnitStatus.SKIPPED}),
    UnitStatus.READY: frozenset({UnitStatus.RUNNING, UnitStatus.SKIPPED}),
    UnitStatus.RUNNING: frozenset({UnitStatus.SUCCEEDED, UnitStatus.FAILED}),
    UnitStatus.SUCCEEDED: frozenset(),
    UnitStatus.FAILED: frozenset(),
    UnitStatus.SKIPPED: frozenset(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True, slots=True)
class UnitState:
    """Mutable execution record of a unit, owned by the coordinator."""

    path: str
    status: UnitStatus = UnitStatus.PENDING
    reason: Reason | None = None
    cause: str | None = None
    error: str | None = None
    output: str = ""
    started_at: datetime | None = None
    ended_at: datetime | None = None

    def transition(
        self,
        status: UnitStatus,
        *,
        reason: Reason | None = None,
        cause: str | None = None,
    ) -> None:
        if status not in _TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.path, self.status.value, status.value)

        self.status = status
        if reason is not None:
            self.reason = reason
        if cause is not None:
            self.cause = cause

        if status is UnitStatus.RUNNING:
            self.started_at = _now()
        elif status.terminal:
            self.ended_at = _now()
