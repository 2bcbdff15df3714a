from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import networkx as nx

from stackgraph.execution_plan import Direction, ExecutionPlan

if TYPE_CHECKING:  # pragma: no cover
    from typing import ClassVar

    from networkx import DiGraph

    from stackgraph.coordinator import Coordinator
    from stackgraph.graph import UnitGraph


class Planner(ABC):
    """
    Decides when each runnable unit of a graph may start. Planners never run or
    mutate units themselves: they hand units to the coordinator.
    """

    name: "ClassVar[str]"

    def __init__(
        self,
        graph: "UnitGraph",
        direction: Direction = Direction.APPLY,
        *,
        ignore_order: bool = False,
    ) -> None:
        self.graph = graph
        self.direction = direction
        self.ignore_order = ignore_order
        self.digraph: "DiGraph" = graph.oriented(direction, ignore_order=ignore_order)

    def plan(self) -> ExecutionPlan:
        """Layer the runnable units so each group only waits on earlier groups."""
        groups = [
            frozenset(generation)
            for generation in nx.topological_generations(self.digraph)
        ]
        return ExecutionPlan(direction=self.direction, groups=groups)

    def waits_on(self, path: str) -> frozenset[str]:
        """Units that must reach a terminal state before `path` may start."""
        return frozenset(self.digraph.predecessors(path))

    def unblocks(self, path: str) -> frozenset[str]:
        return frozenset(self.digraph.successors(path))

    @abstractmethod
    async def execute(self, coordinator: "Coordinator") -> None:
        raise NotImplementedError()
