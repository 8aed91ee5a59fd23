# tests/conftest.py
"""Pytest configuration and fixtures"""
import pytest
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from mockmp.config import MockSettings  # noqa: E402
from mockmp.mocker import Mocker  # noqa: E402
from sample_api import Database, UserApi  # noqa: E402


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment"""
    return MockSettings(_env_file=None)


@pytest.fixture
def mocker(settings):
    """Fresh mocker per test"""
    m = Mocker(settings)
    yield m
    m.reset()


@pytest.fixture
def api(mocker):
    """Spec'd mock of UserApi named 'api'"""
    return mocker.mock(UserApi, name="api")


@pytest.fixture
def db(mocker):
    """Spec'd mock of Database named 'db'"""
    return mocker.mock(Database, name="db")
