"""Agents package: prompts and the LLM-backed SMS extraction agent."""

from .sms_agent import SmsExtractionAgent  # noqa: F401
