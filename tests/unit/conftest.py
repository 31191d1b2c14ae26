"""Unit test fixtures."""

import pytest

from neptune_params.config import ReconcilerConfig
from neptune_params_provisioner.lifecycle import ParameterGroupController
from tests.fixtures.backend import FakeClock, FakeNeptuneBackend


@pytest.fixture
def backend():
    return FakeNeptuneBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return ReconcilerConfig(region="us-east-1")


@pytest.fixture
def controller(backend, config, clock):
    return ParameterGroupController(backend, config, sleep=clock.sleep, clock=clock)
