"""Shared test fixtures for task board tests."""

import sys
from pathlib import Path

import pytest

# Ensure the package root is importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.config import Config
from taskboard.schema import Board, Task
from taskboard.server import create_app
from taskboard.session import BoardContext, InteractionSession
from taskboard.store import BoardStore, CounterIdGenerator


API_KEY = "test-secret"


@pytest.fixture
def store():
    return BoardStore(CounterIdGenerator())


@pytest.fixture
def abc_board():
    """todo=[A, B, C], inProgress=[X], done=[]"""
    return Board(
        todo=(Task("a", "A"), Task("b", "B"), Task("c", "C")),
        in_progress=(Task("x", "X"),),
    )


@pytest.fixture
def session(store):
    return InteractionSession(BoardContext(store))


@pytest.fixture
def seeded_session(store, abc_board):
    return InteractionSession(BoardContext(store, abc_board))


@pytest.fixture
def app(seeded_session):
    config = Config(id_strategy="counter", api_secret=API_KEY)
    return create_app(config, seeded_session)


@pytest.fixture
def client(app):
    c = app.test_client()
    c.environ_base["HTTP_X_API_KEY"] = API_KEY
    return c
