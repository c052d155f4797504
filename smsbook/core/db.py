"""DB connection and helpers for the SMS ledger."""

import json
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from smsbook.core.models import PersistableTransaction

Base = declarative_base()

APP_SETTINGS_ROW_ID = 1


class Category(Base):
    """A spending or income category that transactions are filed under."""

    __tablename__ = "categories"
    category_pk = Column(String, primary_key=True)
    name = Column(String, nullable=False, index=True)


class Wallet(Base):
    """An account the user tracks, with the currency its balance is kept in."""

    __tablename__ = "wallets"
    wallet_pk = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    currency = Column(String, nullable=True)


class Transaction(Base):
    """A persisted transaction created from an SMS."""

    __tablename__ = "transactions"
    transaction_pk = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    amount = Column(Float, nullable=False, index=True)
    note = Column(Text, nullable=False, default="")
    category_fk = Column(String, nullable=False)
    wallet_fk = Column(String, nullable=False)
    date_created = Column(DateTime, nullable=False, index=True)
    transaction_date = Column(DateTime, nullable=False)
    income = Column(Boolean, nullable=False, default=False)
    paid = Column(Boolean, nullable=False, default=True)


class AppSettingsRow(Base):
    """Single-row JSON blob with the user's app settings."""

    __tablename__ = "app_settings"
    id = Column(Integer, primary_key=True)
    settings_json = Column(Text, nullable=False, default="{}")


def get_engine(url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    if url is None:
        from smsbook.core.settings import get_settings

        url = get_settings().database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> "DBHelper":
    """Get a DBHelper instance using a SQLAlchemy session."""
    session = SessionLocal()
    return DBHelper(session)


def init_db(engine: Engine) -> None:
    """Create all tables on the given engine."""
    Base.metadata.create_all(engine)


class DBHelper:
    """Helper class for database operations in the SMS ledger using SQLAlchemy."""

    def __init__(self, session: Session) -> None:
        """Initialize the DBHelper with a SQLAlchemy session."""
        self.session = session

    def list_categories(self) -> list[Category]:
        """Return all categories in insertion order."""
        return list(self.session.scalars(select(Category).order_by(Category.category_pk)))

    def get_wallet(self, wallet_pk: str) -> Wallet | None:
        """Retrieve a wallet by its primary key."""
        return self.session.get(Wallet, wallet_pk)

    def first_wallet(self) -> Wallet | None:
        """Return any wallet, or None if there are none."""
        return self.session.scalars(select(Wallet).order_by(Wallet.wallet_pk).limit(1)).first()

    def find_duplicate(self, amount: float, note: str, since: datetime) -> Transaction | None:
        """Find a transaction with the same amount and note created at or after ``since``."""
        stmt = (
            select(Transaction)
            .where(Transaction.amount == amount)
            .where(Transaction.note == note)
            .where(Transaction.date_created >= since)
            .limit(1)
        )
        return self.session.scalars(stmt).first()

    def insert_transaction(self, txn: PersistableTransaction) -> str:
        """Insert a transaction and return its primary key."""
        row = Transaction(transaction_pk=str(uuid.uuid4()), **txn.model_dump())
        self.session.add(row)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return row.transaction_pk

    def count_transactions(self) -> int:
        """Return the number of stored transactions."""
        return self.session.scalar(select(func.count()).select_from(Transaction)) or 0

    def load_app_settings(self) -> dict[str, Any] | None:
        """Return the decoded app settings blob, or None when no row exists."""
        row = self.session.get(AppSettingsRow, APP_SETTINGS_ROW_ID)
        if row is None:
            return None
        decoded = json.loads(row.settings_json or "{}")
        return decoded if isinstance(decoded, dict) else {}

    def save_app_settings(self, settings: dict[str, Any]) -> None:
        """Store the app settings blob, replacing any previous value."""
        row = self.session.get(AppSettingsRow, APP_SETTINGS_ROW_ID)
        if row is None:
            row = AppSettingsRow(id=APP_SETTINGS_ROW_ID)
            self.session.add(row)
        row.settings_json = json.dumps(settings)
        self.session.commit()

    def close(self) -> None:
        """Close the SQLAlchemy session."""
        self.session.close()
