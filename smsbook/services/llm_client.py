"""Client for OpenAI-compatible chat-completions endpoints."""

import time
from collections.abc import Callable

import requests

from smsbook.core.errors import ExtractionParseError
from smsbook.services.retry import RetryPolicy, send_with_retry

DEFAULT_TIMEOUT_SECONDS = 30.0
TEMPERATURE = 0.2
MAX_TOKENS = 250


class ChatCompletionClient:
    """Posts one system+user exchange and returns the assistant's message content."""

    def __init__(
        self,
        api_key: str,
        url: str,
        model: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retry_policy: RetryPolicy | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client; ``url`` is the full completions URL."""
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.session = session or requests.Session()
        self.sleep = sleep

    def build_payload(self, system_prompt: str, user_content: str) -> dict:
        """Build the JSON request body."""
        return {
            "model": self.model,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def complete(self, system_prompt: str, user_content: str) -> str:
        """Send the exchange and return ``choices[0].message.content``."""
        payload = self.build_payload(system_prompt, user_content)

        def send() -> requests.Response:
            return self.session.post(self.url, headers=self._headers(), json=payload, timeout=self.timeout)

        response = send_with_retry(send, self.retry_policy, self.sleep)
        try:
            data = response.json()
        except ValueError as exc:
            msg = f"Extraction service returned a non-JSON body: {exc}"
            raise ExtractionParseError(msg) from exc
        return extract_message_content(data)


def extract_message_content(data: object) -> str:
    """Pull the first choice's message content out of a chat-completion payload."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        msg = f"Unexpected chat-completion shape: {exc!r}"
        raise ExtractionParseError(msg) from exc
    if content is None:
        return ""
    if not isinstance(content, str):
        msg = f"Message content is {type(content).__name__}, expected a string"
        raise ExtractionParseError(msg)
    return content
