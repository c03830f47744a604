"""Pytest configuration and fixtures for the choice list tests."""

import pytest

from app import create_app
from database import ChoiceListStore, init_db
from models import ChoiceListEntry
from registry import ChoiceRegistry


class FakeStore:
    """In-memory stand-in for ChoiceListStore."""

    def __init__(self, state=None, save_ok=True):
        self.state = state
        self.save_ok = save_ok
        self.saved = []

    def load(self):
        return self.state

    def save(self, entries):
        self.saved.append(list(entries))
        if self.save_ok:
            self.state = list(entries)
        return self.save_ok


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "choice_lists.db")
    init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return ChoiceListStore(db_path)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def registry(fake_store):
    return ChoiceRegistry(fake_store).load()


@pytest.fixture
def env_entry():
    return ChoiceListEntry(name="env", choices=["dev", "staging", "prod"])


@pytest.fixture
def app(tmp_path):
    return create_app(str(tmp_path / "app.db"))


@pytest.fixture
def client(app):
    return app.test_client()
