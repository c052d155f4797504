"""Workers package: the SMS extraction pipeline and its entry points."""

from .listener import on_background_message, on_foreground_message  # noqa: F401
from .sms_processor import SmsProcessor  # noqa: F401
