from typing import TYPE_CHECKING

import networkx as nx
from networkx import generate_network_text

from .execution_plan import Direction

if TYPE_CHECKING:  # pragma: no cover
    from networkx import DiGraph

    from .filters import ExclusionReason
    from .unit import Unit


class UnitGraph:
    """
    The resolved dependency graph of a Stack.

    Edges point from a dependency to its dependents, i.e. in apply order. The stored
    graph is never mutated after resolution; execution order is derived through
    read-only views.
    """

    def __init__(
        self,
        *,
        digraph: "DiGraph",
        units: dict[str, "Unit"],
        exclusions: dict[str, "ExclusionReason"] | None = None,
        excluded_dependencies: str = "satisfied",
    ) -> None:
        self.digraph = digraph
        self.units = units
        self.exclusions = exclusions or {}
        self.excluded_dependencies = excluded_dependencies

    def __contains__(self, path: str) -> bool:
        return path in self.units

    def __len__(self) -> int:
        return len(self.units)

    def __getitem__(self, path: str) -> "Unit":
        return self.units[path]

    @property
    def excluded(self) -> frozenset[str]:
        return frozenset(path for path, unit in self.units.items() if unit.excluded)

    @property
    def runnable(self) -> frozenset[str]:
        return frozenset(path for path, unit in self.units.items() if not unit.excluded)

    def dependencies(self, path: str) -> frozenset[str]:
        return frozenset(self.digraph.predecessors(path))

    def dependents(self, path: str) -> frozenset[str]:
        return frozenset(self.digraph.successors(path))

    def all_dependents(self, path: str) -> frozenset[str]:
        return frozenset(nx.descendants(self.digraph, path))

    def all_dependencies(self, path: str) -> frozenset[str]:
        return frozenset(nx.ancestors(self.digraph, path))

    def dependents_map(self) -> dict[str, list[str]]:
        """Every unit's transitive dependents, for units that have any."""
        return {
            path: sorted(dependents)
            for path in sorted(self.units)
            if (dependents := self.all_dependents(path))
        }

    def blocked_by_exclusion(
        self, direction: Direction = Direction.APPLY, *, ignore_order: bool = False
    ) -> dict[str, str]:
        """
        Runnable units that can never become ready because an excluded unit they
        wait on, directly or not, was never run. Maps each such unit to the excluded
        unit blocking it. Empty unless exclusions are blocking.
        """
        if self.excluded_dependencies != "blocking" or ignore_order:
            return {}

        digraph = (
            self.digraph.reverse(copy=False)
            if direction is Direction.DESTROY
            else self.digraph
        )

        blocked: dict[str, str] = {}
        for path in sorted(self.excluded):
            for waiting in sorted(nx.descendants(digraph, path)):
                if not self.units[waiting].excluded:
                    blocked.setdefault(waiting, path)

        return blocked

    def oriented(
        self, direction: Direction = Direction.APPLY, *, ignore_order: bool = False
    ) -> "DiGraph":
        """
        A read-only view of the runnable units with edges pointing from the unit that
        must finish first to the unit that waits on it.
        """
        view = self.digraph.subgraph(self.runnable)

        if ignore_order:
            return nx.restricted_view(view, [], list(view.edges))
        elif direction is Direction.DESTROY:
            return view.reverse(copy=False)

        return view

    def to_dot(self) -> str:
        """Graphviz definition of the graph, with excluded units colored red."""
        lines = ["digraph {"]
        for path in sorted(self.units):
            style = " [color=red]" if self.units[path].excluded else ""
            lines.append(f'\t"{path}"{style};')

            for dependency in sorted(self.dependencies(path)):
                lines.append(f'\t"{path}" -> "{dependency}";')

        lines.append("}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return "\n".join(generate_network_text(self.digraph, vertical_chains=True))
