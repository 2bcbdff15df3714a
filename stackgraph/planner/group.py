import logging
from typing import TYPE_CHECKING

import anyio

from .base import Planner

if TYPE_CHECKING:  # pragma: no cover
    from stackgraph.coordinator import Coordinator

logger = logging.getLogger(__name__)


class GroupPlanner(Planner):
    """
    Runs the plan one group at a time. Every unit of a group runs concurrently and
    the next group only starts once the whole group reached a terminal state.
    """

    name = "group"

    async def execute(self, coordinator: "Coordinator") -> None:
        plan = self.plan()

        while not coordinator.halted:
            try:
                group = plan.proceed()
            except IndexError:
                break

            paths = sorted(group)
            logger.info(
                "Running group %d/%d: %s",
                plan.current_group + 1,
                len(plan.groups),
                ", ".join(paths),
            )
            coordinator.report.groups.append(paths)

            async with anyio.create_task_group() as tg:
                for path in paths:
                    tg.start_soon(coordinator.run_unit, path, self)
