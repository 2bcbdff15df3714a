"""
Stack module: the unit catalog and graph builder.
"""

import logging
import warnings
from typing import TYPE_CHECKING

import networkx as nx

from .config import Settings, with_overrides
from .exceptions import (
    CyclicGraphError,
    DuplicateUnitError,
    UnresolvedDependencyError,
    UnresolvedStackError,
)
from .filters import flag_excluded
from .graph import UnitGraph
from .unit import Unit

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping
    from typing import Any

logger = logging.getLogger(__name__)


class Stack:
    def __init__(self, units: list[Unit]) -> None:
        self.units: dict[str, Unit] = {}
        for unit in units:
            if unit.path in self.units:
                raise DuplicateUnitError(unit.path)

            self.units[unit.path] = unit

        self._graph: UnitGraph | None = None

    @classmethod
    def from_units(cls, *units: Unit) -> "Stack":
        return cls(units=list(units))

    @classmethod
    def from_mapping(cls, mapping: "Mapping[str, Mapping[str, Any]]") -> "Stack":
        """
        Build a Stack from the config layer's output, a mapping of unit path to
        `{"dependencies": [...], "external": bool}`.
        """
        return cls(
            units=[Unit(path=path, **(attrs or {})) for path, attrs in mapping.items()]
        )

    def resolve(self, settings: Settings | None = None, **overrides: "Any") -> "Stack":
        settings = with_overrides(settings, **overrides)

        if self.resolved:
            warnings.warn(
                "Stack is already resolved. This will override the previous graph.",
                stacklevel=2,
            )

        units = dict(self.units)

        # every dependency must point at a unit of this stack
        missing = [
            (path, dependency)
            for path, unit in sorted(units.items())
            for dependency in sorted(unit.dependencies)
            if dependency not in units
        ]
        if missing:
            if not settings.ignore_unresolved_dependencies:
                raise UnresolvedDependencyError(missing)

            for path, dependency in missing:
                logger.warning(
                    "Ignoring dependency '%s' of unit '%s': not part of the Stack.",
                    dependency,
                    path,
                )

        digraph = nx.DiGraph()
        digraph.add_nodes_from(sorted(units))

        # edges point from a dependency to its dependents
        for path, unit in units.items():
            for dependency in unit.dependencies:
                if dependency in units:
                    digraph.add_edge(dependency, path)

        if not nx.is_directed_acyclic_graph(digraph):
            # report each cycle in dependency order, starting from its smallest path
            cycles = []
            for cycle in nx.simple_cycles(digraph.reverse(copy=False)):
                start = cycle.index(min(cycle))
                cycles.append(tuple(cycle[start:] + cycle[:start]))

            raise CyclicGraphError(sorted(cycles, key=lambda c: (len(c), c)))

        exclusions = flag_excluded(units, digraph, settings)
        for path in exclusions:
            units[path] = units[path].exclude()

        logger.debug(
            "Resolved Stack with %d units (%d excluded).", len(units), len(exclusions)
        )

        self._graph = UnitGraph(
            digraph=digraph,
            units=units,
            exclusions=exclusions,
            excluded_dependencies=settings.excluded_dependencies,
        )
        return self

    @property
    def resolved(self) -> bool:
        return self._graph is not None

    @property
    def graph(self) -> UnitGraph:
        if not self.resolved:
            raise UnresolvedStackError()

        return self._graph
