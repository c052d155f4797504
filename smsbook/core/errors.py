"""Typed pipeline aborts.

Each pipeline stage either returns its value or raises one of these. ``SmsProcessor.process`` turns them into a
``ProcessingOutcome`` so nothing propagates back to the SMS listener.
"""


class PipelineAbort(Exception):
    """Base class for every reason a message stops before insertion."""

    status = "failed"

    def __init__(self, reason: str) -> None:
        """Store the human readable abort reason."""
        super().__init__(reason)
        self.reason = reason


class ConfigurationError(PipelineAbort):
    """Settings or reference data needed by the pipeline are missing."""


class MissingApiKey(ConfigurationError):
    """No API key configured; the message is skipped without side effects."""

    status = "skipped"


class ClassificationRejected(PipelineAbort):
    """The heuristic or the model decided the message is not a transaction."""

    status = "rejected"


class TransientRequestError(PipelineAbort):
    """The extraction service timed out or kept failing server-side."""


class PermanentRequestError(PipelineAbort):
    """The extraction service rejected the request; retrying will not help."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        """Store the reason and the HTTP status when there was one."""
        super().__init__(reason)
        self.status_code = status_code


class ExtractionParseError(PipelineAbort):
    """The model response could not be parsed into a structured record."""


class ExtractionValidationError(PipelineAbort):
    """The structured record lacks a required field or a usable amount."""


class DuplicateTransaction(PipelineAbort):
    """An identical transaction was inserted within the dedup window."""

    status = "duplicate"
