import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from subprocess import STDOUT
from typing import TYPE_CHECKING

import anyio

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping, Sequence

    from .execution_plan import Direction
    from .unit import Unit

logger = logging.getLogger(__name__)


@dataclass(kw_only=True, frozen=True, slots=True)
class RunResult:
    success: bool
    exit_code: int | None = None
    output: str = ""


class UnitRunner(ABC):
    """The external operation run once per unit, e.g. the provisioning tool."""

    @abstractmethod
    async def run(self, unit: "Unit", direction: "Direction") -> RunResult:
        raise NotImplementedError()


class CommandRunner(UnitRunner):
    """
    Runs a command with the unit's directory as its working directory.

    The unit succeeds if the command exits with status 0. Failing to spawn the command
    raises `OSError`. Cancelling the run kills the process.
    """

    def __init__(
        self, command: "Sequence[str]", env: "Mapping[str, str] | None" = None
    ) -> None:
        if not command:
            raise ValueError("CommandRunner requires a command to run.")

        self.command = list(command)
        # extra variables on top of the current environment
        self.env = {**os.environ, **env} if env is not None else None

    async def run(self, unit: "Unit", direction: "Direction") -> RunResult:
        logger.debug(
            "Running %s in %s (%s order).", self.command, unit.path, direction.value
        )

        process = await anyio.run_process(
            self.command, cwd=unit.path, env=self.env, check=False, stderr=STDOUT
        )
        return RunResult(
            success=process.returncode == 0,
            exit_code=process.returncode,
            output=process.stdout.decode(errors="replace"),
        )
