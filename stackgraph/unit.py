import os
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:  # pragma: no cover
    from pydantic import ValidationInfo


def canonical_path(path: str, base: str | None = None) -> str:
    """Absolute, normalized form of `path`, resolved against `base` if relative."""
    if not os.path.isabs(path):
        path = os.path.join(base or os.getcwd(), path)

    return os.path.normpath(path)


class Unit(BaseModel):
    """
    A single deployable configuration directory.

    Units are identified by their canonical path and reference their dependencies by
    path, never by copy. They are immutable: filters produce flagged copies.
    """

    path: str
    dependencies: frozenset[str] = Field(default_factory=frozenset)
    external: bool = False
    excluded: bool = False
    reading: frozenset[str] = Field(default_factory=frozenset)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("path")
    @classmethod
    def _canonical_path(cls, path: str) -> str:
        return canonical_path(path)

    @field_validator("dependencies", "reading")
    @classmethod
    def _canonical_relatives(
        cls, paths: frozenset[str], info: "ValidationInfo"
    ) -> frozenset[str]:
        # relative paths are relative to the unit's own directory
        base = info.data.get("path")
        return frozenset(canonical_path(path, base) for path in paths)

    def exclude(self) -> "Unit":
        if self.excluded:
            return self

        return self.model_copy(update={"excluded": True})

    def __str__(self) -> str:
        return self.path
