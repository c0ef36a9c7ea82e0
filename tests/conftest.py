"""
Shared pytest fixtures for the ACL engine tests.
"""

import pytest
import structlog

from acl_engine import Acl
from acl_shared.config import AclSettings


class MockAssertion:
    """Callable assertion returning a fixed value and recording its arguments."""

    def __init__(self, result: bool):
        self.result = result
        self.calls = []

    def __call__(self, role, resource, privilege):
        self.calls.append((role, resource, privilege))
        return self.result


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def acl():
    """Create an empty Acl."""
    return Acl(settings=AclSettings(_env_file=None))


@pytest.fixture
def assert_true():
    return MockAssertion(True)


@pytest.fixture
def assert_false():
    return MockAssertion(False)


@pytest.fixture
def mock_assertion():
    """Factory for assertions with a chosen result."""
    return MockAssertion
