import pytest

from stackgraph import Direction, Stack, Unit
from stackgraph.filters import ExclusionReason, matches


@pytest.mark.parametrize(
    "path,patterns,expected",
    [
        ("/live/api", ["/live/api"], True),
        ("/live/api", ["api"], True),
        ("/live/api/db", ["api"], True),
        ("/live/api", ["/live/a*"], True),
        ("/live/web", ["/live/a*"], False),
        ("/live/api", [], False),
    ],
)
def test_matches(path, patterns, expected):
    assert matches(path, patterns, working_dir="/live") is expected


def test_no_filters(diamond):
    graph = diamond.resolve(working_dir="/live").graph

    assert graph.excluded == frozenset()
    assert graph.exclusions == {}


def test_exclude_dirs(diamond):
    graph = diamond.resolve(working_dir="/live", exclude_dirs=["web"]).graph

    assert graph.excluded == {"/live/web"}
    assert graph.exclusions == {"/live/web": ExclusionReason.EXCLUDE_DIR}
    # excluded units keep their edges
    assert graph.dependencies("/live/app") == {"/live/api", "/live/web"}


def test_include_pulls_in_dependencies(diamond):
    graph = diamond.resolve(working_dir="/live", include_dirs=["api"]).graph

    assert graph.runnable == {"/live/api", "/live/vpc"}
    assert graph.exclusions["/live/app"] is ExclusionReason.NOT_INCLUDED


def test_strict_include(diamond):
    graph = diamond.resolve(
        working_dir="/live", include_dirs=["api"], strict_include=True
    ).graph

    assert graph.runnable == {"/live/api"}


def test_exclude_wins_over_include(diamond):
    graph = diamond.resolve(
        working_dir="/live", include_dirs=["app"], exclude_dirs=["web"]
    ).graph

    assert graph.runnable == {"/live/app", "/live/api", "/live/vpc"}
    assert graph.exclusions["/live/web"] is ExclusionReason.EXCLUDE_DIR
    assert graph.exclusions["/live/dns"] is ExclusionReason.NOT_INCLUDED


def test_units_reading():
    stack = Stack.from_units(
        Unit(path="/live/vpc", reading={"../common.hcl"}),
        Unit(path="/live/api", dependencies={"../vpc"}),
        Unit(path="/live/dns"),
    )

    graph = stack.resolve(
        working_dir="/live", units_reading=["common.hcl"], strict_include=True
    ).graph

    assert graph.runnable == {"/live/vpc"}


def test_graph_target(diamond):
    graph = diamond.resolve(working_dir="/live", graph_target="api").graph

    assert graph.runnable == {"/live/api", "/live/app"}
    assert graph.exclusions["/live/vpc"] is ExclusionReason.GRAPH_FILTER


def test_graph_target_missing(diamond, caplog):
    graph = diamond.resolve(working_dir="/live", graph_target="nope").graph

    assert graph.runnable == frozenset()
    assert "Graph target '/live/nope' is not part of the Stack." in caplog.text


@pytest.fixture
def with_external():
    return Stack.from_units(
        Unit(path="/shared/account", external=True),
        Unit(path="/live/vpc", dependencies={"/shared/account"}),
    )


@pytest.mark.parametrize(
    "policy,confirm,direction,included",
    [
        ("ignore", True, Direction.APPLY, False),
        ("include", False, Direction.APPLY, True),
        ("include", False, Direction.DESTROY, True),
        ("confirm", True, Direction.APPLY, True),
        ("confirm", False, Direction.APPLY, False),
        ("confirm", True, Direction.DESTROY, False),
    ],
)
def test_external_dependencies(with_external, policy, confirm, direction, included):
    graph = with_external.resolve(
        external_dependencies=policy, confirm_external=confirm, direction=direction
    ).graph

    assert ("/shared/account" in graph.runnable) is included
    if not included:
        assert graph.exclusions["/shared/account"] is ExclusionReason.EXTERNAL


def test_preflagged_units_stay_excluded():
    stack = Stack.from_units(
        Unit(path="/live/vpc", excluded=True), Unit(path="/live/api")
    )

    graph = stack.resolve(working_dir="/live", include_dirs=["*"]).graph

    assert graph.excluded == {"/live/vpc"}
