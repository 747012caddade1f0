"""Data structures for translation job configuration."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

MIN_BATCH_SIZE = 2
MAX_BATCH_SIZE = 10
DEFAULT_BATCH_SIZE = 3

MIN_CONTEXT_LINES = 0
MAX_CONTEXT_LINES = 3

MIN_PARALLEL_COUNT = 2
MAX_PARALLEL_COUNT = 10

# Separator packing several units into one multi-line request
BATCH_SEPARATOR = "|||"


class TranslationMode(str, Enum):
    """How source units are grouped into translator calls."""

    SINGLE = "single"
    MULTI = "multi"


def clamp(value: Any, low: int, high: int, default: int) -> int:
    """
    Coerce a value to int and clamp it to [low, high].

    Values that cannot be read as an integer fall back to ``default``.

    Examples:
        >>> clamp(15, 2, 10, 3)
        10
        >>> clamp("abc", 2, 10, 3)
        3
        >>> clamp(None, 0, 3, 0)
        0
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    return max(low, min(high, number))


def normalize_parallel_count(value: Any) -> Optional[int]:
    """
    Normalize the parallel request count.

    Absent, unreadable, or values of 1 and below mean sequential processing
    and normalize to None; anything else is clamped to [2, 10].
    """
    if value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if number <= 1:
        return None
    return max(MIN_PARALLEL_COUNT, min(MAX_PARALLEL_COUNT, number))


class TranslationConfig(BaseModel):
    """Options controlling how a translation job is scheduled."""

    mode: TranslationMode = Field(default=TranslationMode.SINGLE)
    multi_line_batch_size: int = Field(default=DEFAULT_BATCH_SIZE)
    context_lines: int = Field(default=0)
    enable_context: bool = Field(default=False)
    enable_coherence: bool = Field(default=False)
    parallel_count: Optional[int] = Field(
        default=None
    )  # Single mode only; None means sequential

    @field_validator("mode", mode="before")
    @classmethod
    def coerce_mode(cls, v: Any) -> TranslationMode:
        """Anything other than "multi" selects single-line mode."""
        if isinstance(v, TranslationMode):
            return v
        if isinstance(v, str) and v.strip().lower() == TranslationMode.MULTI.value:
            return TranslationMode.MULTI
        return TranslationMode.SINGLE

    @field_validator("multi_line_batch_size", mode="before")
    @classmethod
    def clamp_batch_size(cls, v: Any) -> int:
        return clamp(v, MIN_BATCH_SIZE, MAX_BATCH_SIZE, DEFAULT_BATCH_SIZE)

    @field_validator("context_lines", mode="before")
    @classmethod
    def clamp_context_lines(cls, v: Any) -> int:
        return clamp(v, MIN_CONTEXT_LINES, MAX_CONTEXT_LINES, 0)

    @field_validator("parallel_count", mode="before")
    @classmethod
    def clamp_parallel_count(cls, v: Any) -> Optional[int]:
        return normalize_parallel_count(v)

    def normalized(self) -> "TranslationConfig":
        """
        Return a copy with every field clamped to its valid range.

        The orchestrator calls this on every job so that configs built with
        ``model_construct`` or mutated after validation are still safe.
        """
        return TranslationConfig(
            mode=self.mode,
            multi_line_batch_size=self.multi_line_batch_size,
            context_lines=self.context_lines,
            enable_context=bool(self.enable_context),
            enable_coherence=bool(self.enable_coherence),
            parallel_count=self.parallel_count,
        )

    @property
    def effective_context_lines(self) -> int:
        """Context window size, forced to at least 1 in coherence mode."""
        if self.enable_coherence:
            return max(self.context_lines, 1)
        return self.context_lines


class PromptTemplates(BaseModel):
    """Prompt templates used by LLM translators."""

    prompt: str
    context_prompt: str = ""
    coherence_prompt: str = ""
    coherence_mode_prompt: str = ""


@dataclass(frozen=True)
class UnitContext:
    """
    Per-call information passed alongside the text to a translator.

    Attributes:
        context: Rendered context window block, if one was built
        enable_context: Whether the context prompt should be used
        coherence: Whether the call runs in coherence (rewrite) mode
        instruction: Extra instruction prepended to the content (batch calls)
    """

    context: Optional[str] = None
    enable_context: bool = False
    coherence: bool = False
    instruction: Optional[str] = None
