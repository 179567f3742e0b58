"""
Shared pytest fixtures for the test suite.

Provides:
- robot_rows: Sample robot rows (four active, one archived)
- memory_store: Seeded InMemoryStore with a fixed-seed RNG
- recorder / service / dispatcher: The comparison stack over memory_store
- async_client: httpx client bound to a FastAPI app serving memory_store
"""
import os
import random

# Settings are read at import time; force the in-memory backend for tests
os.environ["STORE_BACKEND"] = "memory"
os.environ["SEED_FILE"] = ""

import httpx
import pytest

from engine.analytics import InteractionRecorder
from engine.dispatcher import RequestDispatcher
from engine.service import ComparisonService
from store.memory import InMemoryStore
from tests.fixtures.sample_data import sample_robots


@pytest.fixture
def robot_rows():
    """Fresh sample robot rows for each test."""
    return sample_robots()


@pytest.fixture
def memory_store(robot_rows):
    """InMemoryStore seeded with the sample robots."""
    return InMemoryStore(robot_rows, rng=random.Random(1234))


@pytest.fixture
def recorder(memory_store):
    return InteractionRecorder(memory_store)


@pytest.fixture
def service(memory_store, recorder):
    return ComparisonService(memory_store, recorder)


@pytest.fixture
def dispatcher(service):
    return RequestDispatcher(service)


@pytest.fixture
def async_client(memory_store):
    """Create an httpx async client bound to an app serving memory_store."""
    from ui.web.server import create_app

    transport = httpx.ASGITransport(app=create_app(store=memory_store))
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")
