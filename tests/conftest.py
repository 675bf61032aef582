"""Shared fixtures for NGO API tests."""

from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from helpers import FIXED_TODAY
from ngo_api.db import Database


@pytest.fixture
def database(tmp_path) -> Database:
    return Database(tmp_path / "ngo.db")


@pytest.fixture
def clock() -> Callable[[], date]:
    return lambda: FIXED_TODAY


@pytest.fixture
def user(database):
    return database.insert_user("Siyun", "siyun@example.com", "A")
