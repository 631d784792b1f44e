"""
Pytest configuration and fixtures for parceltrack tests.

This module provides shared fixtures used across unit and integration tests.
Random test data comes from one random.Random instance seeded once per test
run; the seed is printed in the pytest header so a failing run can be
reproduced with PARCELTRACK_TEST_SEED.
"""

import os
import random
import sqlite3
import tempfile
import time
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from parceltrack.schema import Parcel, ParcelStatus, now_rfc3339
from parceltrack.service import ParcelService
from parceltrack.store import ParcelStore, connect, init_schema

TEST_SEED = int(os.environ.get("PARCELTRACK_TEST_SEED", time.time_ns()))


def pytest_report_header(config: pytest.Config) -> str:
    return f"parceltrack test seed: {TEST_SEED}"


@pytest.fixture(scope="session")
def rng() -> random.Random:
    """Random generator shared by the whole test run."""
    return random.Random(TEST_SEED)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory database with the parcel table created."""
    connection = connect(":memory:")
    init_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def store(conn: sqlite3.Connection) -> ParcelStore:
    """Store bound to the in-memory database."""
    return ParcelStore(conn)


@pytest.fixture
def service(store: ParcelStore) -> ParcelService:
    """Service bound to the in-memory store."""
    return ParcelService(store)


@pytest.fixture
def make_parcel(rng: random.Random) -> Callable[..., Parcel]:
    """Factory for registered test parcels; fields can be overridden."""

    def _make(**overrides: object) -> Parcel:
        data: dict[str, object] = {
            "client": 1000,
            "address": f"test {rng.randint(1, 999)}",
            "status": ParcelStatus.REGISTERED,
            "created_at": now_rfc3339(),
        }
        data.update(overrides)
        return Parcel(**data)

    return _make
