"""
Shared test fixtures and helpers for the pypod test suite.
"""

import pytest

from pypod import Pod, Provider
from pypod.testing import TestPod

from services import DependentService, DisposableService, SimpleService


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_instance_count():
    SimpleService.instance_count = 0
    yield


@pytest.fixture
def pod():
    """A plain :class:`Pod`, disposed after the test."""
    pod = Pod()
    yield pod
    pod.dispose()


@pytest.fixture
def test_pod():
    """A :class:`TestPod` recording resolutions."""
    pod = TestPod()
    yield pod
    pod.reset()


@pytest.fixture
def simple_provider():
    return Provider(lambda pod: SimpleService(), debug_name="simple")


@pytest.fixture
def dependent_provider(simple_provider):
    return Provider(
        lambda pod: DependentService(pod.resolve(simple_provider)),
        debug_name="dependent",
    )


@pytest.fixture
def disposable_provider():
    return Provider(lambda pod: DisposableService(), debug_name="disposable")
