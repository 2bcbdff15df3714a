import logging
from collections import deque
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import anyio
from anyio import get_cancelled_exc_class

from .config import Settings, with_overrides
from .planner import get_planner
from .report import Report, RunOutcome
from .state import Reason, UnitState, UnitStatus

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import AsyncIterator
    from typing import Any

    from .graph import UnitGraph
    from .planner import Planner
    from .runner import UnitRunner
    from .stack import Stack

logger = logging.getLogger(__name__)


class Coordinator:
    """
    Drives a planner over a resolved graph and owns all execution state.

    Every status transition happens here, on the event loop, between awaits; units
    themselves only run in parallel inside the runner. Parallelism is bounded by a
    FIFO semaphore acquired on Ready -> Running and released on the terminal
    transition.

    Each unit runs at most once and units are unique by directory, so no two running
    units ever share a working directory.
    """

    def __init__(
        self,
        graph: "UnitGraph",
        runner: "UnitRunner",
        settings: Settings | None = None,
        **overrides: "Any",
    ) -> None:
        settings = with_overrides(settings, **overrides)

        self.graph = graph
        self.runner = runner
        self.settings = settings
        self.planner: "Planner" = get_planner(settings.strategy)(
            graph,
            settings.direction,
            ignore_order=settings.ignore_dependency_order,
        )

        self.states: dict[str, UnitState] = {
            path: UnitState(path=path) for path in sorted(graph.units)
        }
        for path in graph.excluded:
            self.states[path].reason = Reason.EXCLUDED

        self.report = Report(
            strategy=self.planner.name, fail_on_skipped=settings.fail_on_skipped
        )
        self.halted = False
        self.max_running = 0

        self._running: set[str] = set()
        self._semaphore: anyio.Semaphore | None = None
        self._started = False

    @property
    def running(self) -> frozenset[str]:
        return frozenset(self._running)

    async def run(self) -> Report:
        if self._started:
            raise RuntimeError("A Coordinator can only run once.")

        self._started = True
        if self.settings.parallelism is not None:
            self._semaphore = anyio.Semaphore(self.settings.parallelism)

        blocked = self.graph.blocked_by_exclusion(
            self.settings.direction, ignore_order=self.settings.ignore_dependency_order
        )
        for path, excluded in blocked.items():
            logger.warning(
                "Skipping unit '%s': it waits on excluded unit '%s'.", path, excluded
            )
            self._skip(path, Reason.EXCLUDED_ANCESTOR, cause=excluded)

        logger.info(
            "Running %d units with the %s planner in %s order.",
            len(self.planner.digraph),
            self.planner.name,
            self.settings.direction.value,
        )

        try:
            await self.planner.execute(self)
        except get_cancelled_exc_class():
            logger.error("Run interrupted; no further units will be started.")
            raise
        finally:
            self._finish()

        return self.report

    def run_sync(self, backend: str = "asyncio") -> Report:
        return anyio.run(self.run, backend=backend)

    async def run_unit(self, path: str, planner: "Planner") -> None:
        """
        Take a unit dispatched by the planner to a terminal state. Units that already
        are terminal, e.g. skipped because an ancestor failed, are left untouched.
        """
        state = self.states[path]
        if state.status.terminal:
            return
        elif self.halted:
            self._skip(path, Reason.EARLY_EXIT)
            return

        for waited in sorted(planner.waits_on(path)):
            status = self.states[waited].status
            if status is UnitStatus.FAILED and self.settings.ignore_dependency_errors:
                logger.warning(
                    "Dependency '%s' of unit '%s' failed. Running it anyway.",
                    waited,
                    path,
                )
            elif status in (UnitStatus.FAILED, UnitStatus.SKIPPED):
                self._skip(path, Reason.ANCESTOR_ERROR, cause=waited)
                return

        state.transition(UnitStatus.READY)
        logger.debug("Unit '%s' is ready.", path)

        async with self._slot():
            if self.halted:
                self._skip(path, Reason.EARLY_EXIT)
                return

            await self._execute(path)

    @asynccontextmanager
    async def _slot(self) -> "AsyncIterator[None]":
        if self._semaphore is None:
            yield
        else:
            async with self._semaphore:
                yield

    async def _execute(self, path: str) -> None:
        state = self.states[path]
        self._running.add(path)
        self.max_running = max(self.max_running, len(self._running))
        state.transition(UnitStatus.RUNNING)
        logger.info("Running unit '%s'.", path)

        try:
            result = await self.runner.run(self.graph[path], self.settings.direction)
        except get_cancelled_exc_class():
            state.error = "interrupted"
            self._fail(path, Reason.INTERRUPTED)
            raise
        except Exception as e:
            state.error = str(e) or e.__class__.__name__
            self._fail(path, Reason.RUN_ERROR)
        else:
            state.output = result.output
            if result.success:
                self._succeed(path)
            else:
                state.error = f"exit code {result.exit_code}"
                self._fail(path, Reason.RUN_ERROR)
        finally:
            self._running.discard(path)

    def _succeed(self, path: str) -> None:
        self.states[path].transition(UnitStatus.SUCCEEDED)
        self.report.chronology.append(path)
        logger.info("Unit '%s' finished successfully.", path)

    def _fail(self, path: str, reason: Reason) -> None:
        state = self.states[path]
        state.transition(UnitStatus.FAILED, reason=reason)
        self.report.chronology.append(path)
        logger.error("Unit '%s' failed: %s", path, state.error)

        if reason is Reason.INTERRUPTED:
            return
        elif self.settings.fail_fast:
            if not self.halted:
                logger.error("Fail fast: no further units will be started.")
            self.halted = True
        elif not self.settings.ignore_dependency_errors:
            self._cascade_skip(path)

    def _skip(self, path: str, reason: Reason, cause: str | None = None) -> None:
        self.states[path].transition(UnitStatus.SKIPPED, reason=reason, cause=cause)
        self.report.chronology.append(path)
        logger.info(
            "Skipping unit '%s' (%s%s).",
            path,
            reason.value,
            f": {cause}" if cause else "",
        )

    def _cascade_skip(self, failed: str) -> None:
        """Skip everything waiting on `failed`, breadth first."""
        queue = deque([failed])
        while queue:
            current = queue.popleft()
            for waiting in sorted(self.planner.unblocks(current)):
                if self.states[waiting].status is UnitStatus.PENDING:
                    self._skip(waiting, Reason.ANCESTOR_ERROR, cause=failed)
                    queue.append(waiting)

    def _finish(self) -> None:
        for path, state in self.states.items():
            if state.status.terminal or state.reason is Reason.EXCLUDED:
                continue
            elif state.status is UnitStatus.RUNNING:
                # only reachable when the run was cancelled mid-flight
                state.error = "interrupted"
                self._fail(path, Reason.INTERRUPTED)
            else:
                self._skip(path, Reason.EARLY_EXIT)

        self.report.outcomes = {
            path: RunOutcome.from_state(state) for path, state in self.states.items()
        }


async def run_all(
    stack: "Stack",
    runner: "UnitRunner",
    settings: Settings | None = None,
    **overrides: "Any",
) -> Report:
    """Resolve `stack`, plan it and run every runnable unit with `runner`."""
    settings = with_overrides(settings, **overrides)

    graph = stack.resolve(settings).graph
    return await Coordinator(graph, runner, settings).run()
