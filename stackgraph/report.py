import csv
import json
from collections import Counter
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .state import Reason, UnitStatus

if TYPE_CHECKING:  # pragma: no cover
    from typing import TextIO

    from .state import UnitState

CSV_FIELDS = ("path", "status", "started_at", "ended_at", "duration", "reason", "cause")


class RunOutcome(BaseModel):
    path: str
    status: UnitStatus
    started_at: datetime | None = None
    ended_at: datetime | None = None
    reason: Reason | None = None
    cause: str | None = None
    error: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_state(cls, state: "UnitState") -> "RunOutcome":
        return cls(
            path=state.path,
            status=state.status,
            started_at=state.started_at,
            ended_at=state.ended_at,
            reason=state.reason,
            cause=state.cause,
            error=state.error,
        )

    @computed_field  # type: ignore[misc]
    @property
    def duration(self) -> float | None:
        """Seconds spent running, if the unit ran at all."""
        if self.started_at is None or self.ended_at is None:
            return None

        return (self.ended_at - self.started_at).total_seconds()


class Report(BaseModel):
    strategy: str
    outcomes: dict[str, RunOutcome] = Field(default_factory=dict)
    groups: list[list[str]] = Field(default_factory=list)
    """Groups actually executed, in order. Only filled by the group strategy."""

    chronology: list[str] = Field(default_factory=list)
    """Units in the order they reached a terminal state."""

    fail_on_skipped: bool = False

    def counts(self) -> Counter[UnitStatus]:
        return Counter(outcome.status for outcome in self.outcomes.values())

    def _with_status(self, status: UnitStatus) -> list[RunOutcome]:
        return [
            outcome
            for _, outcome in sorted(self.outcomes.items())
            if outcome.status is status
        ]

    @property
    def succeeded(self) -> list[RunOutcome]:
        return self._with_status(UnitStatus.SUCCEEDED)

    @property
    def failed(self) -> list[RunOutcome]:
        return self._with_status(UnitStatus.FAILED)

    @property
    def skipped(self) -> list[RunOutcome]:
        return self._with_status(UnitStatus.SKIPPED)

    @property
    def excluded(self) -> list[RunOutcome]:
        return [
            outcome
            for outcome in self._with_status(UnitStatus.PENDING)
            if outcome.reason is Reason.EXCLUDED
        ]

    @property
    def exit_code(self) -> int:
        counts = self.counts()
        if counts[UnitStatus.FAILED]:
            return 1
        elif self.fail_on_skipped and counts[UnitStatus.SKIPPED]:
            return 1

        return 0

    def total_duration(self) -> float:
        """Seconds from the first unit start to the last unit end."""
        starts = [o.started_at for o in self.outcomes.values() if o.started_at]
        ends = [o.ended_at for o in self.outcomes.values() if o.ended_at]
        if not starts or not ends:
            return 0.0

        return (max(ends) - min(starts)).total_seconds()

    def summary(self) -> list[str]:
        """
        A header with the unit total, the run duration and a tally per result,
        followed by one line per failed or skipped unit naming why it did not succeed.
        """
        if not self.outcomes:
            return []

        counts = self.counts()
        tallies = [
            ("succeeded", counts[UnitStatus.SUCCEEDED]),
            ("failed", counts[UnitStatus.FAILED]),
            ("skipped", counts[UnitStatus.SKIPPED]),
            ("excluded", len(self.excluded)),
        ]
        lines = [
            f"Run Summary  {len(self.outcomes)} units  {self.total_duration():.1f}s",
            "  " + ", ".join(f"{label} {count}" for label, count in tallies if count),
        ]

        for outcome in self.failed:
            detail = outcome.error or (outcome.reason.value if outcome.reason else "")
            lines.append(f"FAILED  {outcome.path}: {detail}")

        for outcome in self.skipped:
            reason = outcome.reason.value if outcome.reason else ""
            line = f"SKIPPED {outcome.path}: {reason}"
            if outcome.cause:
                line += f" ({outcome.cause})"
            lines.append(line)

        return lines

    def write_json(self, fp: "TextIO") -> None:
        runs = [
            outcome.model_dump(mode="json", exclude_none=True)
            for _, outcome in sorted(self.outcomes.items())
        ]
        json.dump(runs, fp, indent=2)

    def write_csv(self, fp: "TextIO") -> None:
        writer = csv.DictWriter(fp, fieldnames=CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()

        for _, outcome in sorted(self.outcomes.items()):
            row = outcome.model_dump(mode="json")
            writer.writerow({k: "" if row[k] is None else row[k] for k in CSV_FIELDS})
