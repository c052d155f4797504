"""Tests for app settings parsing and normalization."""

from smsbook.core.settings import DEFAULT_SENDER_KEYWORDS, AppSettings, normalize_base_url


def test_defaults() -> None:
    """An empty blob yields usable defaults and no API key."""
    settings = AppSettings.model_validate({})
    if settings.has_api_key or settings.openai_model != "gpt-4o-mini":
        msg = f"Unexpected defaults: {settings}"
        raise AssertionError(msg)
    if settings.openai_base_url != "https://api.openai.com/v1/chat/completions":
        msg = f"Unexpected default URL: {settings.openai_base_url}"
        raise AssertionError(msg)
    if settings.sms_sender_keywords != DEFAULT_SENDER_KEYWORDS or settings.selected_wallet_pk != "0":
        msg = f"Unexpected default keywords or wallet: {settings}"
        raise AssertionError(msg)


def test_base_url_normalization() -> None:
    """Scheme and completions path are added only when missing."""
    cases = {
        "api.groq.com/openai/v1": "https://api.groq.com/openai/v1/chat/completions",
        "https://openrouter.ai/api/v1/": "https://openrouter.ai/api/v1/chat/completions",
        "http://localhost:11434/v1/chat/completions": "http://localhost:11434/v1/chat/completions",
        "  ": "https://api.openai.com/v1/chat/completions",
    }
    for raw, expected in cases.items():
        if normalize_base_url(raw) != expected:
            msg = f"{raw!r} normalized to {normalize_base_url(raw)!r}, expected {expected!r}"
            raise AssertionError(msg)


def test_keywords_from_delimited_string() -> None:
    """Delimited keyword strings are split, lowercased and deduplicated."""
    settings = AppSettings.model_validate({"smsSenderKeywords": "HDFC, icici;HDFC|  SBI \n"})
    if settings.sms_sender_keywords != ("hdfc", "icici", "sbi"):
        msg = f"Unexpected keywords {settings.sms_sender_keywords}"
        raise AssertionError(msg)


def test_keywords_from_list_and_empty_fallback() -> None:
    """Lists are accepted; an empty list falls back to the built-in keywords."""
    listed = AppSettings.model_validate({"smsSenderKeywords": ["Axis", "axis", "Kotak"]})
    empty = AppSettings.model_validate({"smsSenderKeywords": []})
    if listed.sms_sender_keywords != ("axis", "kotak") or empty.sms_sender_keywords != DEFAULT_SENDER_KEYWORDS:
        msg = f"Unexpected keywords {listed.sms_sender_keywords} / {empty.sms_sender_keywords}"
        raise AssertionError(msg)


def test_blob_keys() -> None:
    """All recognized blob keys are read, rate keys lowercased."""
    settings = AppSettings.model_validate(
        {
            "openaiApiKey": "sk-abc",
            "openaiModel": "",
            "smsPromptTemplate": "  ",
            "selectedWalletPk": 7,
            "customCurrencyAmounts": {"USD": "1", "inr": 83.2, "bad": "x"},
            "cachedCurrencyExchange": None,
            "unrelatedKey": True,
        }
    )
    if not settings.has_api_key or settings.openai_model != "gpt-4o-mini" or settings.sms_prompt_template:
        msg = f"Unexpected key/model/prompt: {settings}"
        raise AssertionError(msg)
    if settings.selected_wallet_pk != "7":
        msg = f"Wallet pk should be a string, got {settings.selected_wallet_pk!r}"
        raise AssertionError(msg)
    if settings.custom_currency_amounts != {"usd": 1.0, "inr": 83.2} or settings.cached_currency_exchange != {}:
        msg = f"Unexpected rate tables: {settings}"
        raise AssertionError(msg)
