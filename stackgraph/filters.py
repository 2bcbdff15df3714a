"""
Inclusion and exclusion of units.

Filters never remove a unit from the graph. They only raise its `excluded` flag so
that the unit is not executed while its dependency edges stay available for
resolution and reporting.
"""

import logging
import os
from enum import Enum
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

import networkx as nx

from .config import ExternalDependencyPolicy
from .execution_plan import Direction
from .unit import canonical_path

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from networkx import DiGraph

    from .config import Settings
    from .unit import Unit

logger = logging.getLogger(__name__)


class ExclusionReason(str, Enum):
    EXCLUDE_DIR = "exclude dir"
    NOT_INCLUDED = "not included"
    EXTERNAL = "external"
    GRAPH_FILTER = "graph filter"


def _with_parents(path: str) -> list[str]:
    paths = [path]
    while (parent := os.path.dirname(path)) != path:
        paths.append(parent)
        path = parent

    return paths


def matches(path: str, patterns: "Iterable[str]", working_dir: str) -> bool:
    """
    Whether `path`, or any directory containing it, matches one of the globs.

    Relative globs are anchored at `working_dir`.
    """
    globs = [canonical_path(pattern, working_dir) for pattern in patterns]
    candidates = _with_parents(path)

    return any(
        fnmatchcase(candidate, glob) for glob in globs for candidate in candidates
    )


def _include_external(settings: "Settings") -> bool:
    if settings.external_dependencies is ExternalDependencyPolicy.INCLUDE:
        return True
    elif settings.external_dependencies is ExternalDependencyPolicy.CONFIRM:
        if settings.direction is Direction.DESTROY:
            # never destroy something outside the working tree on a prompt answer
            if settings.confirm_external:
                logger.warning(
                    "Ignoring confirmation to include external dependencies when"
                    " running in destroy order."
                )
            return False

        return settings.confirm_external

    return False


def flag_excluded(
    units: dict[str, "Unit"], digraph: "DiGraph", settings: "Settings"
) -> dict[str, ExclusionReason]:
    """
    Compute which units are excluded and why.

    `digraph` must have edges pointing from a dependency to its dependents. Exclusion
    via `exclude_dirs` takes precedence over any include rule.
    """
    working_dir = canonical_path(settings.working_dir or os.getcwd())
    excluded: dict[str, ExclusionReason] = {}

    if settings.include_dirs or settings.units_reading:
        reading = {canonical_path(f, working_dir) for f in settings.units_reading}
        included = {
            path
            for path, unit in units.items()
            if matches(path, settings.include_dirs, working_dir)
            or (reading and not reading.isdisjoint(unit.reading))
        }

        if not settings.strict_include:
            for path in list(included):
                included |= nx.ancestors(digraph, path)

        for path in units:
            if path not in included:
                excluded[path] = ExclusionReason.NOT_INCLUDED

    if settings.graph_target is not None:
        target = canonical_path(settings.graph_target, working_dir)
        kept = {target}
        if target in digraph:
            kept |= nx.descendants(digraph, target)
        else:
            logger.warning("Graph target '%s' is not part of the Stack.", target)

        for path in units:
            if path not in kept:
                excluded.setdefault(path, ExclusionReason.GRAPH_FILTER)

    if not _include_external(settings):
        for path, unit in units.items():
            if unit.external and path not in excluded:
                logger.debug("Assuming external unit '%s' is already applied.", path)
                excluded[path] = ExclusionReason.EXTERNAL

    if settings.exclude_dirs:
        for path in units:
            if matches(path, settings.exclude_dirs, working_dir):
                excluded[path] = ExclusionReason.EXCLUDE_DIR

    # flags set upstream (e.g. by the config layer) are never cleared
    for path, unit in units.items():
        if unit.excluded:
            excluded.setdefault(path, ExclusionReason.EXCLUDE_DIR)

    return excluded
