"""Shared fixtures. Nothing here touches the network."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
import requests

from job_hunter.core.models import Listing, Position, Preferences, Profile
from job_hunter.utils.config import Config
from job_hunter.utils.storage import MemoryStore

API_KEY_ENV_VARS = (
    "ADZUNA_APP_ID",
    "ADZUNA_API_KEY",
    "RAPIDAPI_API_KEY",
    "THEMUSE_API_KEY",
    "ANTHROPIC_API_KEY",
)


class FakeResponse:
    """Stands in for requests.Response."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self.payload


class FakeAnthropic:
    """Records messages.create calls and replies with canned text."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.reply)])


class FakeProvider:
    """In-memory job board."""

    def __init__(self, name, listings=None, error=None, available=True):
        self.name = name
        self.requires_api_key = False
        self.listings = listings or []
        self.error = error
        self.available = available
        self.calls = []

    def is_available(self):
        return self.available

    def search(self, query, location):
        self.calls.append((query, location))
        if self.error is not None:
            raise self.error
        return list(self.listings)


def make_listing(id="1", title="Backend Developer", company="Acme", **kwargs):
    return Listing(id=id, title=title, company=company, **kwargs)


@pytest.fixture(autouse=True)
def no_api_keys_in_env(monkeypatch):
    for var in API_KEY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config(tmp_path):
    return Config(
        str(tmp_path / "config.json"),
        overrides={"storage": {"data_dir": str(tmp_path / "data")}},
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def profile():
    return Profile(
        name="Alex Doe",
        email="alex@example.com",
        location="Stockholm",
        skills=["Python", "Django", "SQL", "Docker"],
        positions=[
            Position(company="Initech", title="Developer"),
            Position(company="Globex", title="Senior Developer"),
        ],
    )


@pytest.fixture
def preferences():
    return Preferences(
        job_titles=("Backend Developer",),
        salary_min=50000,
        location="Stockholm",
    )


@pytest.fixture
def fixed_clock():
    now = datetime(2024, 5, 17, 12, 0, tzinfo=timezone.utc)
    return lambda: now
