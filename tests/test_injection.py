# tests/test_injection.py
"""Tests for MOCK/FAKE field injection and the TestsWithMocks base class"""
from typing import Annotated

import pytest

from mockmp import FAKE, MOCK, Mock, inject_mocks, is_any
from mockmp.errors import MockUsageError
from mockmp.injection import injection_points
from mockmp.pytest_plugin import TestsWithMocks
from sample_api import Database, User, UserApi


def make_fake(data_type):
    if data_type is User:
        return User(id=0, name="fake")
    return data_type()


class Holder:
    api: Annotated[UserApi, MOCK]
    user: Annotated[User, FAKE]
    label: Annotated[str, "not a marker"]
    count: int = 0


class TestInjectionPoints:
    def test_only_marked_fields(self):
        points = injection_points(Holder)
        assert points == {"api": (MOCK, UserApi), "user": (FAKE, User)}

    def test_inherited_fields(self):
        class Child(Holder):
            db: Annotated[Database, MOCK]

        assert set(injection_points(Child)) == {"api", "user", "db"}


class TestInjectMocks:
    def test_assigns_mocks_and_fakes(self, mocker):
        holder = Holder()
        assigned = inject_mocks(holder, mocker, make_fake)
        assert assigned == ["api", "user"]
        assert isinstance(holder.api, Mock)
        assert repr(holder.api) == "<Mock of UserApi 'api'>"
        assert holder.user == User(id=0, name="fake")

    def test_reinjection_replaces_instances(self, mocker):
        holder = Holder()
        inject_mocks(holder, mocker, make_fake)
        first_api, first_user = holder.api, holder.user
        inject_mocks(holder, mocker, make_fake)
        assert holder.api is not first_api
        assert holder.user is not first_user

    def test_fake_without_factory(self, mocker):
        with pytest.raises(MockUsageError, match="Holder.user"):
            inject_mocks(Holder(), mocker)


class TestWithInjectedFields(TestsWithMocks):
    api: Annotated[UserApi, MOCK]
    db: Annotated[Database, MOCK]
    user: Annotated[User, FAKE]

    fake_factory = staticmethod(make_fake)

    def setup_mocks(self):
        self.mocker.every(lambda: self.db.load(is_any())).returns({"cached": True})

    def test_fields_are_injected(self):
        assert isinstance(self.api, Mock)
        assert self.user.name == "fake"

    def test_setup_mocks_stubs_are_active(self):
        assert self.db.load("k") == {"cached": True}
        with self.mocker.verify():
            self.db.load("k")

    def test_each_setup_starts_fresh(self):
        self.db.load("k")
        old_api, old_mocker = self.api, self.mocker
        self.teardown_method()
        self.setup_method()
        assert self.api is not old_api
        assert self.mocker is not old_mocker
        assert self.mocker.calls == []
