"""Utilities for handling LLM chat responses."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class LLMResponseError(ValueError):
    """Raised when an LLM backend returns an unusable response."""


def clean_markdown_code_fences(response: str) -> str:
    """
    Remove a surrounding markdown code fence from an LLM reply.

    Models sometimes wrap plain answers in a fenced block such as
    ```text ... ```. Only a fence that encloses the whole reply is removed.

    Args:
        response: Raw response text from the model

    Returns:
        Reply without the enclosing fence

    Examples:
        >>> clean_markdown_code_fences('```text\\nHola\\n```')
        'Hola'
        >>> clean_markdown_code_fences('Hola')
        'Hola'
    """
    cleaned = response.strip()
    if not cleaned.startswith("```"):
        return cleaned

    lines = cleaned.split("\n")
    if len(lines) < 2 or lines[-1].strip() != "```":
        return cleaned

    # Opening fence line may carry a language tag
    return "\n".join(lines[1:-1]).strip()


def extract_chat_completion_text(response: Any) -> str:
    """
    Pull the message text out of a chat-completions response.

    Args:
        response: Response object returned by ``chat.completions.create``

    Returns:
        Message content of the first choice, or an empty string when the
        model produced none (callers fall back to the source text)

    Raises:
        LLMResponseError: If the response has no choices
    """
    if not getattr(response, "choices", None):
        raise LLMResponseError("API returned no choices in response")

    choice = response.choices[0]
    content = choice.message.content or ""

    if not content:
        logger.warning(
            f"⚠️  API returned empty content (finish_reason={choice.finish_reason})"
        )
    elif choice.finish_reason == "length":
        logger.warning(
            f"⚠️  Response was truncated (finish_reason=length). "
            f"Received {len(content)} characters but may be incomplete."
        )

    return content


def extract_gemini_text(payload: dict) -> str:
    """
    Pull the generated text out of a Gemini ``generateContent`` payload.

    Args:
        payload: Decoded JSON response body

    Returns:
        Text of the first candidate part

    Raises:
        LLMResponseError: If the payload does not contain a candidate part
    """
    try:
        return payload["candidates"][0]["content"]["parts"][0].get("text") or ""
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise LLMResponseError(f"Unexpected Gemini response shape: {e}") from e
