import logging
from typing import TYPE_CHECKING

import anyio

from .base import Planner

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable
    from typing import Any

    from anyio.abc import TaskGroup

    from stackgraph.coordinator import Coordinator

logger = logging.getLogger(__name__)


class RunnerPoolPlanner(Planner):
    """
    Dispatches each unit the instant everything it waits on is terminal, without
    waiting for unrelated units of the same topological level.

    Readiness is tracked with a count of outstanding predecessors per unit, which is
    decremented as units complete. Completing a unit may immediately activate others.
    """

    name = "pool"

    def __init__(self, *args: "Any", **kwargs: "Any") -> None:
        super().__init__(*args, **kwargs)

        self.outstanding: dict[str, int] = {}
        self._completed: set[str] = set()
        self._task_group: "TaskGroup | None" = None
        self._coordinator: "Coordinator | None" = None

    def dispatch(self, on_ready: "Callable[[str], None]") -> None:
        """Reset readiness tracking and report the initial frontier to `on_ready`."""
        self.outstanding = {
            path: self.digraph.in_degree(path) for path in self.digraph.nodes
        }
        self._completed = set()

        for path in sorted(self.outstanding):
            if self.outstanding[path] == 0:
                on_ready(path)

    def complete(self, path: str) -> list[str]:
        """Record `path` as terminal and return the units it made ready, in order."""
        if path in self._completed:
            raise ValueError(f"Unit '{path}' was already completed.")

        self._completed.add(path)

        ready = []
        for successor in sorted(self.unblocks(path)):
            self.outstanding[successor] -= 1
            if self.outstanding[successor] == 0:
                ready.append(successor)

        return ready

    @property
    def finished(self) -> bool:
        return len(self._completed) == len(self.outstanding)

    def _start(self, path: str) -> None:
        self._task_group.start_soon(self._work, path, name=f"unit:{path}")

    async def _work(self, path: str) -> None:
        await self._coordinator.run_unit(path, self)

        for successor in self.complete(path):
            logger.debug("Unit '%s' unblocked '%s'.", path, successor)
            self._start(successor)

    async def execute(self, coordinator: "Coordinator") -> None:
        self._coordinator = coordinator

        try:
            async with anyio.create_task_group() as tg:
                self._task_group = tg
                self.dispatch(self._start)
        finally:
            self._task_group = None
            self._coordinator = None
