"""Shared fixtures: an in-memory ledger database, app settings, and a scripted LLM client."""

from collections.abc import Iterator
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from smsbook.core.db import Category, DBHelper, Wallet, init_db
from smsbook.core.settings import AppSettings, Settings
from smsbook.workers.sms_processor import SmsProcessor

FIXED_NOW = datetime(2025, 4, 3, 12, 0, 0)


class FakeClient:
    """Completion client that replays scripted replies and records every call."""

    def __init__(self, *replies: str | Exception) -> None:
        """Queue replies; an Exception instance is raised instead of returned."""
        self.replies = list(replies)
        self.calls: list[tuple[str, str]] = []

    def complete(self, system_prompt: str, user_content: str) -> str:
        """Return the next scripted reply."""
        self.calls.append((system_prompt, user_content))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class Clock:
    """Settable clock for dedup-window tests."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        """Start at ``now``."""
        self.now = now

    def __call__(self) -> datetime:
        """Return the current fake time."""
        return self.now


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across sessions."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Iterator[DBHelper]:
    """Empty ledger database."""
    helper = DBHelper(Session(engine))
    yield helper
    helper.close()


@pytest.fixture
def seeded_db(db: DBHelper) -> DBHelper:
    """Ledger with three categories and a default INR wallet."""
    db.session.add_all(
        [
            Category(category_pk="1", name="Dining"),
            Category(category_pk="2", name="Groceries"),
            Category(category_pk="3", name="Shopping"),
            Wallet(wallet_pk="0", name="Main", currency="inr"),
        ]
    )
    db.session.commit()
    return db


@pytest.fixture
def app_settings() -> AppSettings:
    """App settings with an API key and default everything else."""
    return AppSettings(openaiApiKey="sk-test")


@pytest.fixture
def clock() -> Clock:
    """Fake clock pinned to FIXED_NOW."""
    return Clock()


@pytest.fixture
def make_processor(clock: Clock):
    """Build an SmsProcessor wired to a FakeClient."""

    def _make(client: FakeClient) -> SmsProcessor:
        return SmsProcessor(settings=Settings(), client_factory=lambda _settings: client, clock=clock)

    return _make
