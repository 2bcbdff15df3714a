from .config import ExternalDependencyPolicy, Settings
from .coordinator import Coordinator, run_all
from .execution_plan import Direction, ExecutionPlan
from .graph import UnitGraph
from .planner import GroupPlanner, Planner, RunnerPoolPlanner
from .report import Report, RunOutcome
from .runner import CommandRunner, RunResult, UnitRunner
from .stack import Stack
from .state import Reason, UnitStatus
from .unit import Unit

__all__ = [
    "CommandRunner",
    "Coordinator",
    "Direction",
    "ExecutionPlan",
    "ExternalDependencyPolicy",
    "GroupPlanner",
    "Planner",
    "Reason",
    "Report",
    "RunOutcome",
    "RunResult",
    "RunnerPoolPlanner",
    "Settings",
    "Stack",
    "Unit",
    "UnitGraph",
    "UnitRunner",
    "UnitStatus",
    "run_all",
]
