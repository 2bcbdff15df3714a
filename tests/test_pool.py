import pytest

from stackgraph import Direction, RunnerPoolPlanner


def test_initial_frontier(diamond):
    planner = RunnerPoolPlanner(diamond.resolve().graph)
    ready: list[str] = []

    planner.dispatch(ready.append)

    assert ready == ["/live/dns", "/live/vpc"]
    assert planner.outstanding["/live/app"] == 2
    assert not planner.finished


def test_complete_unblocks_when_all_predecessors_are_done(diamond):
    planner = RunnerPoolPlanner(diamond.resolve().graph)
    planner.dispatch(lambda path: None)

    assert planner.complete("/live/vpc") == ["/live/api", "/live/web"]
    assert planner.complete("/live/api") == []
    assert planner.complete("/live/web") == ["/live/app"]
    assert planner.complete("/live/app") == []
    assert planner.complete("/live/dns") == []
    assert planner.finished


def test_double_completion(chain):
    planner = RunnerPoolPlanner(chain.resolve().graph)
    planner.dispatch(lambda path: None)
    planner.complete("/stack/c")

    with pytest.raises(ValueError):
        planner.complete("/stack/c")


def test_destroy_frontier(chain):
    planner = RunnerPoolPlanner(chain.resolve().graph, Direction.DESTROY)
    ready: list[str] = []

    planner.dispatch(ready.append)

    assert ready == ["/stack/a"]
    assert planner.waits_on("/stack/b") == {"/stack/a"}
    assert planner.complete("/stack/a") == ["/stack/b"]


def test_ignore_order_frontier(chain):
    planner = RunnerPoolPlanner(chain.resolve().graph, ignore_order=True)
    ready: list[str] = []

    planner.dispatch(ready.append)

    assert ready == ["/stack/a", "/stack/b", "/stack/c"]
    assert planner.waits_on("/stack/a") == frozenset()
