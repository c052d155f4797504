"""SMS extraction pipeline: classify, extract, reconcile, deduplicate, persist.

``SmsProcessor.process`` runs one message through a fixed sequence of stages. Each stage returns its result or
raises a ``PipelineAbort`` subclass; ``process`` maps the abort to a ``ProcessingOutcome`` so callers always get a
result and never an exception for expected failures.
"""

import time
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import NamedTuple

from smsbook.agents.sms_agent import CompletionClient, SmsExtractionAgent
from smsbook.core.db import Category, DBHelper
from smsbook.core.errors import (
    ClassificationRejected,
    ConfigurationError,
    DuplicateTransaction,
    MissingApiKey,
    PipelineAbort,
)
from smsbook.core.models import (
    Approved,
    PersistableTransaction,
    ProcessingOutcome,
    RawMessage,
    ReconciledExtraction,
    Rejected,
)
from smsbook.core.settings import DEFAULT_WALLET_PK, AppSettings, Settings, get_settings
from smsbook.core.utils import get_logger, truncate, utcnow
from smsbook.heuristics.classifier import HeuristicClassifier
from smsbook.services.currency import convert_amount
from smsbook.services.llm_client import ChatCompletionClient
from smsbook.services.reconciliation import reconcile
from smsbook.services.retry import RetryPolicy

logger = get_logger("sms-ledger.worker")

MAX_BODY_LOG_LEN = 120


class WalletTarget(NamedTuple):
    """Wallet a transaction will be filed under, with its currency when known."""

    wallet_pk: str
    currency: str | None


class SmsProcessor:
    """Runs the extraction pipeline for one message at a time."""

    def __init__(
        self,
        settings: Settings | None = None,
        client_factory: Callable[[AppSettings], CompletionClient] | None = None,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize with service settings; ``client_factory`` overrides how the LLM client is built."""
        self.settings = settings or get_settings()
        self.client_factory = client_factory or self._default_client
        self.clock = clock
        self.sleep = sleep

    def _default_client(self, app_settings: AppSettings) -> ChatCompletionClient:
        return ChatCompletionClient(
            api_key=app_settings.openai_api_key or "",
            url=app_settings.openai_base_url,
            model=app_settings.openai_model,
            timeout=self.settings.llm_timeout_seconds,
            retry_policy=RetryPolicy(max_attempts=self.settings.llm_max_attempts),
            sleep=self.sleep,
        )

    def process(self, message: RawMessage, db: DBHelper, app_settings: AppSettings) -> ProcessingOutcome:
        """Process one SMS and return what happened."""
        logger.info(f"Processing SMS from '{message.sender}': {truncate(message.body, MAX_BODY_LOG_LEN)}")
        try:
            self.require_api_key(app_settings)
            verdict = self.classify(message, app_settings)
            wallet = self.resolve_wallet(db, app_settings)
            agent = SmsExtractionAgent(self.client_factory(app_settings), app_settings.sms_prompt_template)
            extraction = agent.extract(message, verdict)
            reconciled = reconcile(extraction, verdict, now=self.clock())
            amount = self.convert(reconciled, wallet, app_settings)
            category = self.resolve_category(db, reconciled.category_name)
            txn = self.build_transaction(message, reconciled, amount, category, wallet)
            self.check_duplicate(db, txn)
            transaction_pk = db.insert_transaction(txn)
        except PipelineAbort as abort:
            return self._outcome_for(abort)
        logger.info(f"Inserted transaction {transaction_pk}: '{txn.name}' {txn.amount}")
        return ProcessingOutcome(status="inserted", transaction_pk=transaction_pk)

    def _outcome_for(self, abort: PipelineAbort) -> ProcessingOutcome:
        if abort.status in ("rejected", "duplicate"):
            logger.info(f"SMS {abort.status}: {abort.reason}")
        elif abort.status == "skipped":
            logger.warning(f"SMS skipped: {abort.reason}")
        else:
            logger.error(f"SMS processing failed ({type(abort).__name__}): {abort.reason}")
        return ProcessingOutcome(status=abort.status, reason=abort.reason)

    def require_api_key(self, app_settings: AppSettings) -> None:
        """Abort when no API key is configured."""
        if not app_settings.has_api_key:
            msg = "OpenAI API key is missing in settings"
            raise MissingApiKey(msg)

    def classify(self, message: RawMessage, app_settings: AppSettings) -> Approved:
        """Run the heuristic classifier and abort on rejection."""
        verdict = HeuristicClassifier(app_settings.sms_sender_keywords).evaluate(message)
        if isinstance(verdict, Rejected):
            raise ClassificationRejected(verdict.reason.value)
        logger.info(
            f"Heuristic approved: {verdict.amount} {verdict.currency} "
            f"({'income' if verdict.is_income else 'expense'})"
        )
        return verdict

    def resolve_wallet(self, db: DBHelper, app_settings: AppSettings) -> WalletTarget:
        """Find the wallet to file under: configured, then default, then any."""
        configured = app_settings.selected_wallet_pk
        wallet = db.get_wallet(configured)
        if wallet is None and configured != DEFAULT_WALLET_PK:
            wallet = db.get_wallet(DEFAULT_WALLET_PK)
        if wallet is None:
            wallet = db.first_wallet()
        if wallet is None:
            logger.warning(f"No wallets found; keeping configured wallet '{configured}'")
            return WalletTarget(configured, None)
        return WalletTarget(wallet.wallet_pk, wallet.currency)

    def convert(self, reconciled: ReconciledExtraction, wallet: WalletTarget, app_settings: AppSettings) -> Decimal:
        """Convert the reconciled amount into the wallet's currency when the two differ."""
        return convert_amount(
            reconciled.amount,
            reconciled.currency,
            wallet.currency,
            app_settings.custom_currency_amounts,
            app_settings.cached_currency_exchange,
        )

    def resolve_category(self, db: DBHelper, name: str | None) -> Category:
        """Match the model's category by name, falling back to the first category."""
        categories = db.list_categories()
        if not categories:
            msg = "No categories found"
            raise ConfigurationError(msg)
        if name:
            wanted = name.strip().lower()
            for category in categories:
                if category.name.lower() == wanted:
                    return category
            logger.info(f"No category named '{name}'; using '{categories[0].name}'")
        return categories[0]

    def build_transaction(
        self,
        message: RawMessage,
        reconciled: ReconciledExtraction,
        amount: Decimal,
        category: Category,
        wallet: WalletTarget,
    ) -> PersistableTransaction:
        """Assemble the record to insert."""
        value = float(amount)
        return PersistableTransaction(
            name=reconciled.title,
            amount=value,
            note=message.body,
            category_fk=category.category_pk,
            wallet_fk=wallet.wallet_pk,
            date_created=self.clock(),
            transaction_date=reconciled.date,
            income=value > 0,
            paid=True,
        )

    def check_duplicate(self, db: DBHelper, txn: PersistableTransaction) -> None:
        """Abort when the same amount and note were stored inside the dedup window."""
        since = txn.date_created - timedelta(minutes=self.settings.dedup_window_minutes)
        existing = db.find_duplicate(txn.amount, txn.note, since)
        if existing is not None:
            msg = f"Duplicate of transaction {existing.transaction_pk}"
            raise DuplicateTransaction(msg)
