"""Tests for the foreground and background SMS entry points."""

import json

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smsbook.core.db import DBHelper
from smsbook.core.models import SmsEvent
from smsbook.workers import listener
from tests.conftest import FakeClient

EVENT = SmsEvent(address="AX-ICICIB", body="Rs.500 debited from A/c for UPI payment to SWIGGY")
REPLY = json.dumps({"title": "Swiggy", "amount": -500, "category": "Dining"})


class TrackingDB(DBHelper):
    """DBHelper that remembers whether it was closed."""

    closed = False

    def close(self) -> None:
        """Close and record it."""
        self.closed = True
        super().close()


def _open_db(engine, monkeypatch) -> TrackingDB:
    helper = TrackingDB(Session(engine))
    monkeypatch.setattr(listener, "get_db", lambda: helper)
    return helper


def test_foreground_uses_callers_handle(seeded_db, app_settings, make_processor) -> None:
    """The foreground entry point processes with the given handle and settings."""
    outcome = listener.on_foreground_message(EVENT, seeded_db, app_settings, make_processor(FakeClient(REPLY)))
    if outcome.status != "inserted" or seeded_db.count_transactions() != 1:
        msg = f"Expected an insert, got {outcome}"
        raise AssertionError(msg)


def test_foreground_swallows_unexpected_errors(seeded_db, app_settings, make_processor) -> None:
    """Unexpected exceptions become failed outcomes."""
    processor = make_processor(FakeClient(RuntimeError("socket exploded")))
    outcome = listener.on_foreground_message(EVENT, seeded_db, app_settings, processor)
    if outcome.status != "failed" or "socket exploded" not in (outcome.reason or ""):
        msg = f"Expected a failed outcome, got {outcome}"
        raise AssertionError(msg)


def test_background_loads_settings_and_closes(engine, seeded_db, make_processor, monkeypatch) -> None:
    """The background entry point reads stored settings, inserts, and closes its handle."""
    seeded_db.save_app_settings({"openaiApiKey": "sk-test", "smsSenderKeywords": "icici"})
    helper = _open_db(engine, monkeypatch)
    outcome = listener.on_background_message(EVENT, make_processor(FakeClient(REPLY)))
    if outcome.status != "inserted" or not helper.closed:
        msg = f"Expected an insert and a closed handle, got {outcome} closed={helper.closed}"
        raise AssertionError(msg)
    if seeded_db.count_transactions() != 1:
        msg = "Expected the background insert to be visible"
        raise AssertionError(msg)


def test_background_without_settings_row(engine, db, make_processor, monkeypatch) -> None:
    """No stored settings means the message is skipped."""
    helper = _open_db(engine, monkeypatch)
    outcome = listener.on_background_message(EVENT, make_processor(FakeClient()))
    if outcome.status != "skipped" or not helper.closed:
        msg = f"Expected a skip with a closed handle, got {outcome}"
        raise AssertionError(msg)


def test_background_closes_on_failure(engine, seeded_db, make_processor, monkeypatch) -> None:
    """The handle is closed even when processing blows up."""
    seeded_db.save_app_settings({"openaiApiKey": "sk-test"})
    helper = _open_db(engine, monkeypatch)
    outcome = listener.on_background_message(EVENT, make_processor(FakeClient(RuntimeError("boom"))))
    if outcome.status != "failed" or not helper.closed:
        msg = f"Expected a failure with a closed handle, got {outcome}"
        raise AssertionError(msg)


def test_foreground_handle_usable_after_failed_commit(seeded_db, app_settings, make_processor, monkeypatch) -> None:
    """A failed insert is rolled back so the caller's handle keeps working."""
    real_commit = seeded_db.session.commit
    attempts = []

    def flaky_commit() -> None:
        attempts.append(1)
        if len(attempts) == 1:
            msg = "database is locked"
            raise SQLAlchemyError(msg)
        real_commit()

    monkeypatch.setattr(seeded_db.session, "commit", flaky_commit)
    processor = make_processor(FakeClient(REPLY, REPLY))
    first = listener.on_foreground_message(EVENT, seeded_db, app_settings, processor)
    if first.status != "failed" or "database is locked" not in (first.reason or ""):
        msg = f"Expected a failed insert, got {first}"
        raise AssertionError(msg)
    second = listener.on_foreground_message(EVENT, seeded_db, app_settings, processor)
    if second.status != "inserted" or seeded_db.count_transactions() != 1:
        msg = f"Expected the retry to insert once, got {second} count={seeded_db.count_transactions()}"
        raise AssertionError(msg)
