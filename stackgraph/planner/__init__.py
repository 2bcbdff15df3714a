from .base import Planner
from .group import GroupPlanner
from .pool import RunnerPoolPlanner

PLANNERS: dict[str, type[Planner]] = {
    GroupPlanner.name: GroupPlanner,
    RunnerPoolPlanner.name: RunnerPoolPlanner,
}


def get_planner(name: str) -> type[Planner]:
    try:
        return PLANNERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown planner '{name}'. Choose one of: {', '.join(sorted(PLANNERS))}."
        ) from None


__all__ = ["GroupPlanner", "Planner", "RunnerPoolPlanner", "get_planner"]
