"""Pytest configuration and fixtures."""

import pytest

from pairdex.assets import Token
from pairdex.pools import PoolRegistry
from pairdex.routing import Router
from pairdex.runtime import Runtime
from tests.helpers import GENESIS_TIME, TOKEN_A, TOKEN_B, TOKEN_C, TOKEN_D, Clock


@pytest.fixture
def clock() -> Clock:
    """Return a clock frozen at GENESIS_TIME."""
    return Clock(GENESIS_TIME)


@pytest.fixture
def runtime(clock: Clock) -> Runtime:
    """Return a fresh runtime driven by the test clock."""
    return Runtime(clock=clock)


@pytest.fixture
def token_a(runtime: Runtime) -> Token:
    return Token.deploy(runtime, "AAA", TOKEN_A)


@pytest.fixture
def token_b(runtime: Runtime) -> Token:
    return Token.deploy(runtime, "BBB", TOKEN_B)


@pytest.fixture
def token_c(runtime: Runtime) -> Token:
    return Token.deploy(runtime, "CCC", TOKEN_C)


@pytest.fixture
def token_d(runtime: Runtime) -> Token:
    return Token.deploy(runtime, "DDD", TOKEN_D)


@pytest.fixture
def registry(runtime: Runtime) -> PoolRegistry:
    return PoolRegistry.deploy(runtime)


@pytest.fixture
def router(runtime: Runtime, registry: PoolRegistry) -> Router:
    return Router.deploy(runtime, registry)
