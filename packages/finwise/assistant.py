"""Chat assistant backed by an OpenAI-compatible chat completions endpoint.

The assistant forwards the stored conversation as-is: user messages map to
the ``user`` role and assistant replies to ``assistant``. No system prompt is
added here. Any failure (missing key, HTTP error, malformed response) turns
into canned fallback text so the chat never breaks; nothing is retried.

Configuration (read at construction time):

- ``FINWISE_CHAT_API_KEY`` (falls back to ``GROQ_API_KEY``)
- ``FINWISE_CHAT_BASE_URL`` (default: Groq's OpenAI-compatible endpoint)
- ``FINWISE_CHAT_MODEL`` (default: ``llama3-70b-8192``)
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import Any, Literal, TypedDict

from openai import OpenAI

from .logging_setup import get_logger
from .models import ChatMessage, Sender

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama3-70b-8192"

NOT_CONFIGURED_REPLY = (
    "I'm sorry, I can't process your request right now. "
    "The AI service is not properly configured."
)
ERROR_REPLY = "I'm sorry, there was an error processing your request. Please try again later."

_logger = get_logger("finwise.assistant")


class CompletionMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


def format_chat_history(history: Iterable[ChatMessage]) -> list[CompletionMessage]:
    return [
        {
            "role": "user" if m.sender == Sender.USER else "assistant",
            "content": m.content,
        }
        for m in history
    ]


def _create_client(*, api_key: str, base_url: str) -> OpenAI:
    return OpenAI(api_key=api_key, base_url=base_url)


class ChatAssistant:
    """Completion-service client with canned fallbacks."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> None:
        self.api_key = api_key or os.getenv("FINWISE_CHAT_API_KEY") or os.getenv("GROQ_API_KEY")
        self.base_url = base_url or os.getenv("FINWISE_CHAT_BASE_URL") or DEFAULT_BASE_URL
        self.model = model or os.getenv("FINWISE_CHAT_MODEL") or DEFAULT_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: OpenAI | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> OpenAI:
        if self._client is None:
            assert self.api_key is not None
            self._client = _create_client(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def complete(self, messages: list[CompletionMessage]) -> str:
        """Return the model's reply text, or fallback text on any failure."""

        if not self.configured:
            _logger.warning("assistant:not_configured model=%s", self.model)
            return NOT_CONFIGURED_REPLY

        try:
            resp: Any = self._get_client().chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = resp.choices[0].message.content
        except Exception as e:  # noqa: BLE001 - every failure maps to the fallback reply
            _logger.warning("assistant:completion_failed model=%s error=%s", self.model, e)
            return ERROR_REPLY

        if not isinstance(content, str) or not content.strip():
            _logger.warning("assistant:empty_completion model=%s", self.model)
            return ERROR_REPLY
        return content.strip()

    def reply(self, history: Iterable[ChatMessage]) -> str:
        return self.complete(format_chat_history(history))


__all__ = [
    "ChatAssistant",
    "CompletionMessage",
    "format_chat_history",
    "NOT_CONFIGURED_REPLY",
    "ERROR_REPLY",
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
]
