"""Services package: chat-completions client, retry policy, currency conversion, and reconciliation."""

from .llm_client import ChatCompletionClient  # noqa: F401
from .retry import RetryPolicy  # noqa: F401
