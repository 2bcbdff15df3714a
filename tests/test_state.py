import pytest

from stackgraph import Reason, UnitStatus
from stackgraph.exceptions import InvalidTransitionError
from stackgraph.state import UnitState

RAN = [UnitStatus.READY, UnitStatus.RUNNING]


@pytest.mark.parametrize("terminal", [UnitStatus.SUCCEEDED, UnitStatus.FAILED])
def test_run_to_completion(terminal):
    state = UnitState(path="/live/vpc")

    state.transition(UnitStatus.READY)
    state.transition(UnitStatus.RUNNING)
    assert state.started_at is not None
    assert state.ended_at is None

    state.transition(terminal)

    assert state.status is terminal
    assert state.status.terminal
    assert state.ended_at >= state.started_at


@pytest.mark.parametrize("before", [[], [UnitStatus.READY]])
def test_skip_before_running(before):
    state = UnitState(path="/live/app")
    for status in before:
        state.transition(status)

    state.transition(UnitStatus.SKIPPED, reason=Reason.ANCESTOR_ERROR, cause="/x")

    assert state.status is UnitStatus.SKIPPED
    assert state.reason is Reason.ANCESTOR_ERROR
    assert state.cause == "/x"
    assert state.started_at is None
    assert state.ended_at is not None


@pytest.mark.parametrize(
    "history,target",
    [
        ([UnitStatus.SKIPPED], UnitStatus.PENDING),
        ([*RAN, UnitStatus.SUCCEEDED], UnitStatus.RUNNING),
        (RAN, UnitStatus.SKIPPED),
        (RAN, UnitStatus.READY),
        ([*RAN, UnitStatus.FAILED], UnitStatus.SUCCEEDED),
        ([], UnitStatus.RUNNING),
        ([], UnitStatus.SUCCEEDED),
    ],
)
def test_invalid_transition(history, target):
    state = UnitState(path="/live/vpc")
    for status in history:
        state.transition(status)

    with pytest.raises(InvalidTransitionError) as exc_info:
        state.transition(target)

    assert f"to '{target.value}'" in str(exc_info.value)
    # the rejected transition leaves the state untouched
    assert state.status is (history[-1] if history else UnitStatus.PENDING)
