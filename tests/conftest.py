"""Shared fixtures for content slot tests."""

import pytest

from contentslots.database import ContentSlotRepository
from tests.fakes import FakeDatabase, FakePool


@pytest.fixture
def fake_db():
    """In-memory tables behind the fake pool."""
    return FakeDatabase()


@pytest.fixture
def fake_pool(fake_db):
    """Fake asyncpg pool counting acquired and released connections."""
    return FakePool(fake_db)


@pytest.fixture
def repository(fake_pool):
    """Repository on unprefixed tables, non-atomic writes."""
    return ContentSlotRepository(fake_pool, acquire_timeout=5)
