# mockmp/pytest_plugin.py
"""pytest integration, registered through the ``pytest11`` entry point."""
from __future__ import annotations

from typing import Iterator, Optional

import pytest

from mockmp.core.ports import FakeFactory
from mockmp.injection import inject_mocks
from mockmp.mocker import Mocker


@pytest.fixture
def mockmp() -> Iterator[Mocker]:
    """A fresh mocker per test, reset on teardown."""
    mocker = Mocker()
    yield mocker
    mocker.reset()


class TestsWithMocks:
    """
    Base class for class-style tests.

    Before each test a new mocker is created and every ``MOCK``/``FAKE``
    annotated attribute is (re)injected; ``setup_mocks`` then runs so
    subclasses can declare common stubs.
    """

    mocker: Mocker
    fake_factory: Optional[FakeFactory] = None

    def setup_method(self, method=None) -> None:
        self.mocker = Mocker()
        inject_mocks(self, self.mocker, self.fake_factory)
        self.setup_mocks()

    def setup_mocks(self) -> None:
        pass

    def teardown_method(self, method=None) -> None:
        self.mocker.reset()
