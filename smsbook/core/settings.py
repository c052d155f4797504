"""Configuration for the SMS ledger service.

Two layers live here. ``Settings`` holds process-level service configuration read from the environment or a
``.env`` file. ``AppSettings`` models the per-user JSON blob stored in the ``app_settings`` table and is passed
explicitly into the pipeline for every message.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
COMPLETIONS_PATH = "/chat/completions"
DEFAULT_WALLET_PK = "0"

DEFAULT_SENDER_KEYWORDS: tuple[str, ...] = (
    "axis",
    "icici",
    "hdfc",
    "sbi",
    "kotak",
    "yesbnk",
    "idfc",
    "indus",
    "pnb",
    "canara",
    "baroda",
    "federal",
    "hsbc",
    "citi",
    "rbl",
)

_KEYWORD_SPLIT_RE = re.compile(r"[,;|\n]+")


class Settings(BaseSettings):
    """Service settings for the SMS ledger."""

    database_url: str = "sqlite:///smsbook.db"
    llm_timeout_seconds: float = 30.0
    llm_max_attempts: int = 3
    dedup_window_minutes: int = 5
    log_file: str = "logs/sms_processing.log"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the service settings."""
    return Settings()


def normalize_base_url(value: str | None) -> str:
    """Return a full chat-completions URL for a configured base URL.

    A missing scheme gets ``https://``; the completions path is appended unless already present.
    """
    url = (value or "").strip() or DEFAULT_OPENAI_BASE_URL
    if "://" not in url:
        url = f"https://{url}"
    url = url.rstrip("/")
    if not url.endswith(COMPLETIONS_PATH):
        url = f"{url}{COMPLETIONS_PATH}"
    return url


def normalize_sender_keywords(value: object) -> list[str]:
    """Lowercase, strip and deduplicate sender keywords, preserving order."""
    if value is None:
        return []
    items = _KEYWORD_SPLIT_RE.split(value) if isinstance(value, str) else [str(v) for v in value]
    seen: list[str] = []
    for item in items:
        keyword = item.strip().lower()
        if keyword and keyword not in seen:
            seen.append(keyword)
    return seen


class AppSettings(BaseModel):
    """Per-user options read from the ``appSettings`` JSON blob."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    openai_api_key: str | None = Field(default=None, alias="openaiApiKey")
    openai_model: str = Field(default=DEFAULT_OPENAI_MODEL, alias="openaiModel")
    openai_base_url: str = Field(default=DEFAULT_OPENAI_BASE_URL + COMPLETIONS_PATH, alias="openaiBaseUrl")
    sms_prompt_template: str | None = Field(default=None, alias="smsPromptTemplate")
    sms_sender_keywords: tuple[str, ...] = Field(default=DEFAULT_SENDER_KEYWORDS, alias="smsSenderKeywords")
    selected_wallet_pk: str = Field(default=DEFAULT_WALLET_PK, alias="selectedWalletPk")
    custom_currency_amounts: dict[str, float] = Field(default_factory=dict, alias="customCurrencyAmounts")
    cached_currency_exchange: dict[str, float] = Field(default_factory=dict, alias="cachedCurrencyExchange")

    @field_validator("openai_api_key", "sms_prompt_template", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("openai_model", mode="before")
    @classmethod
    def _default_model(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_OPENAI_MODEL
        return value.strip() if isinstance(value, str) else value

    @field_validator("openai_base_url", mode="before")
    @classmethod
    def _normalize_base_url(cls, value: object) -> str:
        return normalize_base_url(value if isinstance(value, str) else None)

    @field_validator("sms_sender_keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value: object) -> tuple[str, ...]:
        keywords = normalize_sender_keywords(value)
        return tuple(keywords) if keywords else DEFAULT_SENDER_KEYWORDS

    @field_validator("selected_wallet_pk", mode="before")
    @classmethod
    def _wallet_pk_to_str(cls, value: object) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_WALLET_PK
        return str(value).strip()

    @field_validator("custom_currency_amounts", "cached_currency_exchange", mode="before")
    @classmethod
    def _lowercase_rate_keys(cls, value: object) -> dict:
        if not isinstance(value, dict):
            return {}
        rates = {}
        for code, rate in value.items():
            try:
                rates[str(code).lower()] = float(rate)
            except (TypeError, ValueError):
                continue
        return rates

    @property
    def has_api_key(self) -> bool:
        """Whether an API key is configured."""
        return bool(self.openai_api_key)
