from enum import Enum
from typing import TYPE_CHECKING, Annotated, Literal

from annotated_types import Ge
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .execution_plan import Direction

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any


class ExternalDependencyPolicy(str, Enum):
    IGNORE = "ignore"
    INCLUDE = "include"
    CONFIRM = "confirm"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STACKGRAPH_", extra="forbid")

    parallelism: Annotated[int, Ge(1)] | None = None
    """Max number of units running at once. Unbounded if unset."""

    strategy: Literal["group", "pool"] = "pool"
    """Scheduling strategy: wave-by-wave groups or the runner pool."""

    direction: Direction = Direction.APPLY
    """Apply order runs dependencies first, destroy order runs dependents first."""

    ignore_dependency_errors: bool = False
    """Run units even when one of their dependencies failed."""

    ignore_dependency_order: bool = False
    """Treat the graph as edge-free and run everything as a single group."""

    fail_fast: bool = False
    """Stop dispatching new units after the first failure."""

    fail_on_skipped: bool = False
    """Return a non-zero exit code when any unit was skipped."""

    include_dirs: list[str] = Field(default_factory=list)
    """Globs selecting the units to run. Everything else is excluded."""

    exclude_dirs: list[str] = Field(default_factory=list)
    """Globs of units to exclude. Takes precedence over every include rule."""

    strict_include: bool = False
    """Only run explicitly included units, never their dependencies."""

    units_reading: list[str] = Field(default_factory=list)
    """Include units whose configuration reads any of these files."""

    graph_target: str | None = None
    """Only run this unit and the units that transitively depend on it."""

    external_dependencies: ExternalDependencyPolicy = ExternalDependencyPolicy.IGNORE
    """How to treat dependencies outside of the working directory."""

    confirm_external: bool = False
    """Pre-resolved answer used by the `confirm` external dependency policy."""

    ignore_unresolved_dependencies: bool = False
    """Drop dependency edges to paths that are not part of the Stack."""

    excluded_dependencies: Literal["satisfied", "blocking"] = "satisfied"
    """Whether excluded units satisfy their dependents or block them."""

    working_dir: str | None = None
    """Directory relative globs are matched against."""


def with_overrides(settings: Settings | None = None, **overrides: "Any") -> Settings:
    """`settings` with keyword overrides applied and validated."""
    if settings is None:
        return Settings(**overrides)
    elif overrides:
        return Settings.model_validate({**settings.model_dump(), **overrides})

    return settings
