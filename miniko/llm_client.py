"""LLM client infrastructure used by the explanation service."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Any

from . import constants

logger = logging.getLogger(__name__)

OPENROUTER_DEFAULT_MODEL = "liquid/lfm-2.5-1.2b-thinking:free"
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_DEFAULT_REFERER = "http://localhost:5173"
OPENROUTER_DEFAULT_TITLE = "Miniko"


class LLMClient(ABC):
    """Abstract base for LLM API clients.

    Every request carries a timeout in seconds: the client's own unless
    the caller passes one to :meth:`complete`.
    """

    @abstractmethod
    def complete(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
        timeout: float | None = None,
    ) -> str:
        """Send a prompt to the LLM and return the raw text response."""
        ...


class ClaudeLLMClient(LLMClient):
    """Anthropic Messages API client; an empty content list yields ``""``."""

    _LAZY_IMPORT = object()

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        client: Any = _LAZY_IMPORT,
        timeout: float = constants.DEFAULT_LLM_TIMEOUT_SECONDS,
    ):
        if client is ClaudeLLMClient._LAZY_IMPORT:
            import anthropic

            self._client = anthropic.Anthropic(timeout=timeout)
        else:
            self._client = client
        self._model = model
        self._timeout = timeout

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
        timeout: float | None = None,
    ) -> str:
        effective_timeout = timeout or self._timeout
        logger.debug(
            "ClaudeLLMClient.complete: model=%s, max_tokens=%d, timeout=%.1fs",
            self._model,
            max_tokens,
            effective_timeout,
        )
        response = self._client.messages.create(
            model=self._model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_message}],
            timeout=effective_timeout,
        )
        text_blocks = [
            block.text for block in response.content or [] if getattr(block, "text", None)
        ]
        return "".join(text_blocks)


class OpenAILLMClient(LLMClient):
    """OpenAI chat completions client; no choices yields ``""``."""

    _LAZY_IMPORT = object()

    def __init__(
        self,
        model: str = "gpt-4o",
        client: Any = _LAZY_IMPORT,
        timeout: float = constants.DEFAULT_LLM_TIMEOUT_SECONDS,
    ):
        if client is OpenAILLMClient._LAZY_IMPORT:
            import openai

            self._client = openai.OpenAI(timeout=timeout)
        else:
            self._client = client
        self._model = model
        self._timeout = timeout

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
        timeout: float | None = None,
    ) -> str:
        effective_timeout = timeout or self._timeout
        logger.debug(
            "OpenAILLMClient.complete: model=%s, max_tokens=%d, timeout=%.1fs",
            self._model,
            max_tokens,
            effective_timeout,
        )
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            max_tokens=max_tokens,
            timeout=effective_timeout,
        )
        return _first_choice_text(response)


class OpenRouterLLMClient(LLMClient):
    """Wraps OpenRouter's OpenAI-compatible API.

    Settings come from constructor arguments, falling back to the
    ``OPENROUTER_*`` environment variables.
    """

    _LAZY_IMPORT = object()

    def __init__(
        self,
        model: str = "",
        client: Any = _LAZY_IMPORT,
        base_url: str = "",
        api_key_env: str = "OPENROUTER_API_KEY",
        temperature: float = 0.2,
        timeout: float = constants.DEFAULT_LLM_TIMEOUT_SECONDS,
    ):
        if client is OpenRouterLLMClient._LAZY_IMPORT:
            import openai

            api_key = os.environ.get(api_key_env, "")
            if not api_key:
                raise ValueError(
                    f"Environment variable {api_key_env} is not set. "
                    "Set it to your OpenRouter API key."
                )
            self._client = openai.OpenAI(
                base_url=base_url
                or os.environ.get("OPENROUTER_BASE_URL", OPENROUTER_DEFAULT_BASE_URL),
                api_key=api_key,
                timeout=timeout,
                default_headers={
                    "HTTP-Referer": os.environ.get(
                        "OPENROUTER_HTTP_REFERER", OPENROUTER_DEFAULT_REFERER
                    ),
                    "X-Title": os.environ.get("OPENROUTER_APP_TITLE", OPENROUTER_DEFAULT_TITLE),
                },
            )
        else:
            self._client = client
        self._model = model or os.environ.get("OPENROUTER_MODEL", OPENROUTER_DEFAULT_MODEL)
        self._temperature = temperature
        self._timeout = timeout

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: int = 1024,
        timeout: float | None = None,
    ) -> str:
        effective_timeout = timeout or self._timeout
        logger.info(
            "OpenRouterLLMClient.complete: model=%s, max_tokens=%d, timeout=%.1fs",
            self._model,
            max_tokens,
            effective_timeout,
        )
        response = self._client.chat.completions.create(
            model=self._model,
            temperature=self._temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            max_tokens=max_tokens,
            timeout=effective_timeout,
        )
        return _first_choice_text(response)


def _first_choice_text(response: Any) -> str:
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def get_llm_client(
    provider: str = "openrouter",
    model: str = "",
    client: Any = None,
    base_url: str = "",
    timeout: float = constants.DEFAULT_LLM_TIMEOUT_SECONDS,
) -> LLMClient:
    """Factory for LLM clients.

    Args:
        provider: "openrouter", "claude", or "openai"
        model: Model name override (empty string = use default)
        client: Pre-built API client for DI/testing
        base_url: Base URL override for OpenRouter-compatible endpoints
        timeout: Per-request timeout in seconds
    """
    kwargs: dict[str, Any] = {"timeout": timeout}
    if model:
        kwargs["model"] = model
    if client is not None:
        kwargs["client"] = client

    if provider == "openrouter":
        if base_url:
            kwargs["base_url"] = base_url
        return OpenRouterLLMClient(**kwargs)

    if provider == "claude":
        return ClaudeLLMClient(**kwargs)

    if provider == "openai":
        return OpenAILLMClient(**kwargs)

    raise ValueError(f"Unknown LLM provider: {provider}")
