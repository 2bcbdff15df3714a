from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any


class StackgraphError(Exception):
    def __init__(self, *args: "Any", **kwargs: "Any") -> None:
        super().__init__(*args, **kwargs)


##
## GRAPH RESOLUTION
##


class GraphResolutionError(StackgraphError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class UnresolvedStackError(GraphResolutionError):
    def __init__(self) -> None:
        super().__init__("Stacks must be resolved before they can be used.")


class DuplicateUnitError(GraphResolutionError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Unit '{path}' is declared more than once in the Stack.")


class CyclicGraphError(GraphResolutionError):
    def __init__(self, cycles: list[tuple[str, ...]]) -> None:
        self.cycles = cycles
        cycle_str = "\n  ".join(" -> ".join((*cycle, cycle[0])) for cycle in cycles)
        super().__init__(
            "Stacks cannot contain dependency cycles. Offending cycles:\n"
            f"  {cycle_str}"
        )


class UnresolvedDependencyError(GraphResolutionError):
    def __init__(self, missing: list[tuple[str, str]]) -> None:
        self.missing = missing
        missing_str = "\n  ".join(
            f"{unit} -> {dependency}" for unit, dependency in missing
        )
        super().__init__(
            "Units depend on paths that are not part of the Stack:\n"
            f"  {missing_str}"
        )


##
## EXECUTION
##


class ExecutionError(StackgraphError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidTransitionError(ExecutionError):
    def __init__(self, path: str, current: str, target: str) -> None:
        super().__init__(
            f"Unit '{path}' cannot transition from '{current}' to '{target}'."
        )
