"""Render the prompt text sent to an LLM from templates and placeholder values."""

import logging
import re
from typing import Dict, Iterable, Optional

from translator.errors import PlaceholderResolutionMismatch
from translator.schemas import PromptTemplates

logger = logging.getLogger(__name__)

CONTENT = "content"
SOURCE_LANG = "sourceLang"
TARGET_LANG = "targetLang"
CUSTOM_PROMPT = "custom_prompt"
CONTEXT_PROMPT = "context_prompt"
COHERENCE_PROMPT = "coherence_prompt"
CONTEXT = "context"

MAIN_PLACEHOLDERS = (
    CONTENT,
    SOURCE_LANG,
    TARGET_LANG,
    CUSTOM_PROMPT,
    CONTEXT_PROMPT,
    COHERENCE_PROMPT,
)

COHERENCE_TOKEN = "{" + COHERENCE_PROMPT + "}"


def _placeholder_pattern(names: Iterable[str]) -> "re.Pattern[str]":
    alternatives = "|".join(re.escape(name) for name in names)
    return re.compile(r"\{(" + alternatives + r")\}")


_MAIN_PATTERN = _placeholder_pattern(MAIN_PLACEHOLDERS)
_CONTEXT_PATTERN = _placeholder_pattern([CONTEXT])


def fill_placeholders(
    template: str, values: Dict[str, str], pattern: "re.Pattern[str]" = _MAIN_PATTERN
) -> str:
    """
    Substitute recognized placeholders in a single pass.

    Substituted values are never scanned again, so text that itself looks
    like a placeholder is inserted verbatim.

    Args:
        template: Template text
        values: Resolved value per placeholder name
        pattern: Compiled pattern matching the recognized placeholders

    Returns:
        Rendered text

    Raises:
        PlaceholderResolutionMismatch: If a recognized placeholder has no value
    """

    def _resolve(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in values:
            raise PlaceholderResolutionMismatch(name)
        return values[name]

    return pattern.sub(_resolve, template)


class PromptResolver:
    """Resolves prompt templates for one translator configuration."""

    def __init__(self, templates: PromptTemplates, custom_prompt: Optional[str] = None):
        self.templates = templates
        self.custom_prompt = (custom_prompt or "").strip()

    def main_template(self, coherence: bool = False) -> str:
        """Template used for the request body, by mode."""
        if coherence and self.templates.coherence_mode_prompt:
            return self.templates.coherence_mode_prompt
        return self.templates.prompt

    def render_context_prompt(self, context: Optional[str], enable_context: bool) -> str:
        if not (enable_context and context and self.templates.context_prompt):
            return ""
        return fill_placeholders(
            self.templates.context_prompt, {CONTEXT: context}, _CONTEXT_PATTERN
        )

    def render_coherence_prompt(self, context: Optional[str], coherence: bool) -> str:
        if not (coherence and context and self.templates.coherence_prompt):
            return ""
        return fill_placeholders(
            self.templates.coherence_prompt, {CONTEXT: context}, _CONTEXT_PATTERN
        )

    def render(
        self,
        content: str,
        source_language: str,
        target_language: str,
        context: Optional[str] = None,
        enable_context: bool = False,
        coherence: bool = False,
    ) -> str:
        """
        Render the prompt for one unit of work.

        In coherence mode no language pair applies, so the language
        placeholders resolve to empty strings. When coherence content exists
        but the active template has no ``{coherence_prompt}`` token, the
        content is appended after the rendered prompt. Only the coherence
        placeholder gets this fallback.

        Args:
            content: Text unit (or packed batch) to send
            source_language: Source language code
            target_language: Target language code
            context: Rendered context window block, if any
            enable_context: Whether the context prompt is active
            coherence: Whether coherence mode is active

        Returns:
            Fully rendered prompt
        """
        template = self.main_template(coherence)
        coherence_content = self.render_coherence_prompt(context, coherence)

        values = {
            CONTENT: content,
            SOURCE_LANG: "" if coherence else source_language,
            TARGET_LANG: "" if coherence else target_language,
            CUSTOM_PROMPT: self.custom_prompt,
            CONTEXT_PROMPT: self.render_context_prompt(context, enable_context),
            COHERENCE_PROMPT: coherence_content,
        }
        prompt = fill_placeholders(template, values)

        if coherence_content and COHERENCE_TOKEN not in template:
            logger.debug("Template has no {coherence_prompt} token, appending it")
            prompt = f"{prompt}\n\n{coherence_content}"

        return prompt
