"""Code explanations over an LLM, with a locally synthesized fallback.

:class:`ExplanationService` is the thin remote call.  Everything else here
builds the local answer used when the remote answer is empty or the call
fails, so a caller always gets readable text.
"""

from __future__ import annotations

import json
import logging
import re

from . import constants
from .api import build_trace, final_output, is_possibly_incomplete
from .classifier import detect_dialect
from .llm_client import LLMClient
from .messages import translate

logger = logging.getLogger(__name__)

STEP_LIST_LIMIT = 6

_LOOP_HINT = re.compile(r"loop|for|while", re.IGNORECASE)
_CONDITION_HINT = re.compile(r"if|switch|case", re.IGNORECASE)
_MENTIONS_INCOMPLETE = re.compile(r"incomplet|incomplete|faltan|missing", re.IGNORECASE)
_RATE_LIMITED = re.compile(r"rate-?limit", re.IGNORECASE)
_NO_CREDITS = re.compile(r"credits|insufficient|402", re.IGNORECASE)

_RATE_LIMITED_STATUS = 429
_NO_CREDITS_STATUS = 402


class ExplanationService:
    """Asks an LLM to explain a snippet in plain language.

    Each request is bounded by *timeout* seconds; a timed-out call raises
    from the client like any other failure.
    """

    def __init__(
        self,
        client: LLMClient,
        max_tokens: int = 1024,
        timeout: float = constants.DEFAULT_LLM_TIMEOUT_SECONDS,
    ):
        self._client = client
        self._max_tokens = max_tokens
        self._timeout = timeout

    def explain(self, code: str, prompt: str, locale: str = constants.DEFAULT_LOCALE) -> str:
        question = prompt.strip() or translate(locale, "ai_default_prompt")
        logger.info("Requesting explanation (locale=%s, %d chars)", locale, len(code))
        return self._client.complete(
            translate(locale, "ai_system_prompt"),
            translate(locale, "ai_user_message", prompt=question, code=code),
            max_tokens=self._max_tokens,
            timeout=self._timeout,
        )


def _active_lines(code: str) -> list[str]:
    return [line for line in code.split("\n") if line.strip()]


def build_local_explanation(code: str, locale: str = constants.DEFAULT_LOCALE) -> str:
    """One-paragraph summary: active line count, loops, conditions."""
    lines = _active_lines(code)
    has_loops = any(_LOOP_HINT.search(line) for line in lines)
    has_conditions = any(_CONDITION_HINT.search(line) for line in lines)
    return " ".join(
        [
            translate(locale, "local_active_lines", count=len(lines)),
            translate(locale, "local_loops" if has_loops else "local_no_loops"),
            translate(locale, "local_conditions" if has_conditions else "local_no_conditions"),
            translate(locale, "local_hint"),
        ]
    )


def build_step_list(code: str, locale: str = constants.DEFAULT_LOCALE) -> list[str]:
    return [
        translate(locale, "answer_step", index=index, text=line.strip())
        for index, line in enumerate(_active_lines(code)[:STEP_LIST_LIMIT], start=1)
    ]


def output_from_trace(code: str, dialect_id: str, locale: str = constants.DEFAULT_LOCALE) -> str:
    outputs = final_output(build_trace(code, dialect_id, locale))
    if outputs:
        return "\n".join(outputs)
    return translate(locale, "no_output")


def build_fallback_answer(
    prompt: str,
    code: str,
    dialect_id: str,
    locale: str = constants.DEFAULT_LOCALE,
    incomplete: bool = False,
) -> str:
    question = prompt.strip() or translate(locale, "no_question")
    response = translate(locale, "answer_incomplete" if incomplete else "answer_basic", question=question)
    summary = translate(locale, "answer_summary", summary=build_local_explanation(code, locale))
    steps = " ".join(build_step_list(code, locale))
    output = translate(locale, "answer_output", output=output_from_trace(code, dialect_id, locale))
    return "\n\n".join([response, summary, steps, output])


def inject_incomplete_notice(answer: str, locale: str = constants.DEFAULT_LOCALE) -> str:
    return f"{translate(locale, 'incomplete_notice')}\n\n{answer}"


def normalize_answer(
    answer: str,
    prompt: str,
    code: str,
    dialect_id: str,
    locale: str = constants.DEFAULT_LOCALE,
) -> str:
    """Empty answers become the fallback; incomplete code gets a notice."""
    trimmed = answer.strip()
    incomplete = is_possibly_incomplete(code, dialect_id)
    if not trimmed:
        return build_fallback_answer(prompt, code, dialect_id, locale, incomplete)
    if incomplete and not _MENTIONS_INCOMPLETE.search(trimmed):
        return inject_incomplete_notice(trimmed, locale)
    return trimmed


def friendly_error_message(error: BaseException, locale: str = constants.DEFAULT_LOCALE) -> str:
    """Map a provider failure to a short message a reader can act on."""
    status = getattr(error, "status_code", None)
    if status == _RATE_LIMITED_STATUS:
        return translate(locale, "ai_rate_limited")
    if status == _NO_CREDITS_STATUS:
        return translate(locale, "ai_insufficient_credits")

    message = str(error).strip()
    if message.startswith("{") and message.endswith("}"):
        try:
            payload = json.loads(message)
        except json.JSONDecodeError:
            return message
        details = payload.get("error") if isinstance(payload, dict) else None
        if not isinstance(details, dict):
            return message
        if details.get("code") == _RATE_LIMITED_STATUS:
            return translate(locale, "ai_rate_limited")
        if details.get("code") == _NO_CREDITS_STATUS:
            return translate(locale, "ai_insufficient_credits")
        return details.get("message") or message
    if _RATE_LIMITED.search(message):
        return translate(locale, "ai_rate_limited")
    if _NO_CREDITS.search(message):
        return translate(locale, "ai_insufficient_credits")
    return message


def explain_with_fallback(
    service: ExplanationService,
    code: str,
    prompt: str,
    locale: str = constants.DEFAULT_LOCALE,
    dialect_id: str | None = None,
) -> str:
    """Remote explanation, normalized; any failure yields the local answer."""
    dialect = dialect_id or detect_dialect(code, locale).id
    try:
        answer = service.explain(code, prompt, locale)
    except Exception as exc:
        logger.warning("Remote explanation failed, using local fallback: %s", exc)
        local = normalize_answer(build_local_explanation(code, locale), prompt, code, dialect, locale)
        return f"{translate(locale, 'ai_error')}\n{friendly_error_message(exc, locale)}\n\n{local}"
    return normalize_answer(answer or "", prompt, code, dialect, locale)
