import pytest

from stackgraph import Stack

from .runners import ScriptedRunner


@pytest.fixture(
    params=[
        pytest.param(("asyncio", {"use_uvloop": False}), id="asyncio"),
        pytest.param(
            ("trio", {"restrict_keyboard_interrupt_to_checkpoints": True}), id="trio"
        ),
    ],
    scope="session",
)
def anyio_backend(request):
    return request.param


@pytest.fixture(params=["group", "pool"])
def strategy(request):
    return request.param


@pytest.fixture
def runner():
    return ScriptedRunner()


@pytest.fixture
def chain():
    # a depends on b, b depends on c
    return Stack.from_mapping(
        {
            "/stack/a": {"dependencies": ["/stack/b"]},
            "/stack/b": {"dependencies": ["/stack/c"]},
            "/stack/c": {},
        }
    )


@pytest.fixture
def diamond():
    #     app
    #    /   \
    #  api   web
    #    \   /
    #     vpc     (plus an unrelated 'dns')
    return Stack.from_mapping(
        {
            "/live/vpc": {},
            "/live/api": {"dependencies": ["../vpc"]},
            "/live/web": {"dependencies": ["../vpc"]},
            "/live/app": {"dependencies": ["../api", "../web"]},
            "/live/dns": {},
        }
    )
