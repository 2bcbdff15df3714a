import anyio

from stackgraph import RunResult, UnitRunner


class ScriptedRunner(UnitRunner):
    """
    A runner whose per-unit outcome is scripted. Units listed in `failures` fail, units
    in `errors` raise, and `delays` holds per-unit run durations in seconds.
    """

    def __init__(
        self,
        failures: set[str] | None = None,
        errors: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
        default_delay: float = 0,
    ) -> None:
        self.failures = failures or set()
        self.errors = errors or {}
        self.delays = delays or {}
        self.default_delay = default_delay

        self.started: list[str] = []
        self.finished: list[str] = []
        self.running: set[str] = set()
        self.max_running = 0
        self.directions = []

    async def run(self, unit, direction) -> RunResult:
        if unit.path in self.running:
            raise RuntimeError(f"{unit.path} is already running")

        self.started.append(unit.path)
        self.directions.append(direction)
        self.running.add(unit.path)
        self.max_running = max(self.max_running, len(self.running))

        try:
            await anyio.sleep(self.delays.get(unit.path, self.default_delay))

            if unit.path in self.errors:
                raise self.errors[unit.path]

            failed = unit.path in self.failures
            return RunResult(
                success=not failed,
                exit_code=1 if failed else 0,
                output=f"ran {unit.path}",
            )
        finally:
            self.running.discard(unit.path)
            self.finished.append(unit.path)
