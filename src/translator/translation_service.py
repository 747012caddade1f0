"""Translator capabilities: the backends that turn one unit of text into another."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

import httpx
from openai import AsyncOpenAI

from common.config import settings
from common.llm_utils import (
    clean_markdown_code_fences,
    extract_chat_completion_text,
    extract_gemini_text,
)
from common.retry_utils import retry_with_exponential_backoff
from common.string_utils import preview_line, truncate_for_logging
from translator.errors import TranslationCallFailedError
from translator.prompt_resolver import PromptResolver
from translator.schemas import BATCH_SEPARATOR, PromptTemplates, UnitContext

logger = logging.getLogger(__name__)


class Translator(ABC):
    """Capability that translates one unit of text."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable translator name."""

    @abstractmethod
    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        context: Optional[UnitContext] = None,
    ) -> str:
        """
        Translate one unit of text.

        Args:
            text: Unit text, or several units packed with the batch separator
            source_language: Source language code (e.g., 'en')
            target_language: Target language code (e.g., 'zh')
            context: Optional context window and mode flags for this call

        Returns:
            Translated text

        Raises:
            TranslationCallFailedError: If the backend call fails
        """

    async def translate_batch(
        self, texts: List[str], source_language: str, target_language: str
    ) -> List[str]:
        """Translate several texts, one ``translate`` call per text."""
        return list(
            await asyncio.gather(
                *(self.translate(text, source_language, target_language) for text in texts)
            )
        )

    async def aclose(self) -> None:
        """Release network resources held by the translator."""


class MockTranslator(Translator):
    """Translator that tags text instead of translating it, for tests and demos."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    @property
    def name(self) -> str:
        return "Mock Translator"

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        context: Optional[UnitContext] = None,
    ) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)

        tag = f"[{source_language}->{target_language}]"
        if context and context.coherence:
            tag = "[coherent]"

        # Keep packed batches splittable by tagging each part separately
        parts = text.split(BATCH_SEPARATOR)
        return BATCH_SEPARATOR.join(f"{tag} {part.strip()}" for part in parts)


def _normalize_openai_base_url(base_url: str) -> str:
    """Chat-completions clients expect the versioned root, e.g. ``.../v1``."""
    base_url = base_url.rstrip("/")
    if not base_url.endswith("/v1"):
        base_url += "/v1"
    return base_url


class LLMTranslator(Translator):
    """
    Translator backed by a chat LLM.

    The backend is chosen once, at construction, from the provider tag:
    ``openai`` and ``deepseek`` use the OpenAI-compatible chat-completions API
    through ``AsyncOpenAI``; ``google`` calls Gemini ``generateContent`` through
    ``httpx``. Every call renders its prompt with ``PromptResolver``.
    """

    OPENAI_COMPATIBLE = ("openai", "deepseek")
    PROVIDERS = OPENAI_COMPATIBLE + ("google",)

    DEFAULT_BASE_URLS = {
        "openai": "https://api.openai.com",
        "deepseek": "https://api.deepseek.com",
        "google": "https://generativelanguage.googleapis.com",
    }

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        templates: Optional[PromptTemplates] = None,
        custom_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the translator and its backend client.

        Args:
            provider: Provider tag: openai, deepseek or google
            model: Model name passed to the backend
            api_key: Backend API key
            base_url: Optional endpoint override
            templates: Prompt templates; defaults come from settings
            custom_prompt: Free text for the {custom_prompt} placeholder
            temperature: Sampling temperature for chat-completions backends
            timeout: Per-request timeout in seconds
            max_retries: Transient-error retries per call
            http_client: Optional httpx client for the Gemini backend

        Raises:
            ValueError: If the provider tag is unknown
        """
        self.provider = provider.strip().lower()
        if self.provider not in self.PROVIDERS:
            raise ValueError(
                f"Unsupported translation provider: {provider}. "
                f"Expected one of {', '.join(self.PROVIDERS)}"
            )

        self.model = model
        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_BASE_URLS[self.provider]).rstrip("/")
        self.temperature = (
            settings.translator_temperature if temperature is None else temperature
        )
        self.timeout = settings.translator_timeout if timeout is None else timeout
        self.max_retries = (
            settings.translator_max_retries if max_retries is None else max_retries
        )
        self.resolver = PromptResolver(
            templates or settings.default_prompt_templates(), custom_prompt
        )

        self.client: Optional[AsyncOpenAI] = None
        self.http_client: Optional[httpx.AsyncClient] = None
        self._call_backend: Callable[[str], Awaitable[str]]

        if self.provider in self.OPENAI_COMPATIBLE:
            # Retries are handled by retry_with_exponential_backoff
            self.client = AsyncOpenAI(
                api_key=api_key,
                base_url=_normalize_openai_base_url(self.base_url),
                timeout=self.timeout,
                max_retries=0,
            )
            self._call_backend = self._call_chat_completions
        else:
            self.http_client = http_client or httpx.AsyncClient(timeout=self.timeout)
            self._call_backend = self._call_gemini

        logger.info(f"Initialized {self.name} translator")

    @property
    def name(self) -> str:
        return f"{self.provider} ({self.model})"

    @property
    def _retry_decorator(self):
        return retry_with_exponential_backoff(
            max_retries=self.max_retries,
            initial_delay=settings.translator_retry_initial_delay,
            exponential_base=settings.translator_retry_exponential_base,
            max_delay=settings.translator_retry_max_delay,
        )

    def build_prompt(
        self,
        text: str,
        source_language: str,
        target_language: str,
        context: Optional[UnitContext] = None,
    ) -> str:
        """Render the prompt for one call; batch instructions precede the content."""
        context = context or UnitContext()
        content = f"{context.instruction}\n\n{text}" if context.instruction else text
        return self.resolver.render(
            content,
            source_language,
            target_language,
            context=context.context,
            enable_context=context.enable_context,
            coherence=context.coherence,
        )

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        context: Optional[UnitContext] = None,
    ) -> str:
        prompt = self.build_prompt(text, source_language, target_language, context)
        logger.debug(
            f"Sending to {self.name}: {preview_line(text)}\n"
            f"Prompt:\n{truncate_for_logging(prompt)}"
        )

        try:
            response = await self._retry_decorator(self._call_backend)(prompt)
        except Exception as e:
            logger.error(f"❌ {self.name} call failed: {e}")
            raise TranslationCallFailedError(str(e), provider=self.provider) from e

        return clean_markdown_code_fences(response)

    async def _call_chat_completions(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
        )
        return extract_chat_completion_text(response)

    async def _call_gemini(self, prompt: str) -> str:
        url = f"{self.base_url}/v1beta/models/{self.model}:generateContent"
        response = await self.http_client.post(
            url,
            params={"key": self.api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        response.raise_for_status()
        return extract_gemini_text(response.json())

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.close()
        if self.http_client is not None:
            await self.http_client.aclose()


def create_translator(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    templates: Optional[PromptTemplates] = None,
    custom_prompt: Optional[str] = None,
) -> Translator:
    """
    Build the translator for a run from a provider tag.

    Missing arguments fall back to settings. Without an API key the mock
    translator is returned so the pipeline still runs end to end.

    Args:
        provider: openai, deepseek, google or mock
        model: Model name
        api_key: Backend API key
        base_url: Optional endpoint override
        templates: Prompt templates
        custom_prompt: Free text for the {custom_prompt} placeholder

    Returns:
        Translator instance

    Raises:
        ValueError: If the provider tag is unknown
    """
    provider = (provider or settings.translator_provider).strip().lower()
    if provider == "mock":
        return MockTranslator()

    if provider not in LLMTranslator.PROVIDERS:
        raise ValueError(f"Unsupported translation provider: {provider}")

    api_key = api_key or settings.translator_api_key
    if not api_key:
        logger.warning(
            f"No API key configured for {provider} - translator will run in mock mode"
        )
        return MockTranslator()

    return LLMTranslator(
        provider=provider,
        model=model or settings.translator_model,
        api_key=api_key,
        base_url=base_url or settings.translator_base_url,
        templates=templates,
        custom_prompt=custom_prompt,
    )
