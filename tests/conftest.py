"""Shared pytest fixtures for diforge tests."""

import pytest

from diforge.container import Container
from diforge.lock_mode import LockMode
from diforge.metadata import InspectMetadataProvider

pytest_plugins = ["diforge.integrations.pytest_plugin"]


@pytest.fixture()
def container() -> Container:
    """Default container with thread locking."""
    return Container()


@pytest.fixture()
def unlocked_container() -> Container:
    """Container with locking disabled."""
    return Container(lock_mode=LockMode.NONE)


@pytest.fixture()
def metadata_provider() -> InspectMetadataProvider:
    """InspectMetadataProvider instance."""
    return InspectMetadataProvider()
