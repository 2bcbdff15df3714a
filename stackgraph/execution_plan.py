import json
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class Direction(str, Enum):
    APPLY = "apply"
    """Dependencies run before their dependents."""

    DESTROY = "destroy"
    """Dependents run before their dependencies."""


class ExecutionPlan(BaseModel):
    uuid: UUID = Field(default_factory=uuid4)
    direction: Direction = Direction.APPLY
    groups: list[frozenset[str]]
    current_group: int = -1

    def proceed(self) -> frozenset[str]:
        if self.current_group + 1 >= len(self.groups):
            raise IndexError("Execution plan has no groups left.")

        self.current_group += 1
        return self.groups[self.current_group]

    def group_of(self, path: str) -> int:
        for idx, group in enumerate(self.groups):
            if path in group:
                return idx

        raise KeyError(path)

    def as_lists(self) -> list[list[str]]:
        return [sorted(group) for group in self.groups]

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.as_lists(), indent=indent)
