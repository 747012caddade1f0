"""Configuration management for the subtitle translator."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TRANSLATION_PROMPT = (
    "Translate the following subtitle from {sourceLang} to {targetLang}, "
    "keeping the original meaning and tone. Reply with the translation only.\n"
    "{custom_prompt}\n"
    "{context_prompt}\n"
    "{content}"
)

DEFAULT_CONTEXT_PROMPT = (
    "The surrounding subtitles are given below for reference. "
    "Only translate the line marked [Target].\n\n{context}"
)

DEFAULT_COHERENCE_PROMPT = (
    "These subtitles come from automatic speech recognition and may contain "
    "misheard words. Use the neighbouring lines to correct the line marked "
    "[Target].\n\n{context}"
)

DEFAULT_COHERENCE_MODE_PROMPT = (
    "Rewrite the following subtitle so that it reads fluently and fixes "
    "obvious recognition errors. Do not translate it. Reply with the "
    "corrected line only.\n"
    "{custom_prompt}\n"
    "{coherence_prompt}\n"
    "{content}"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # .env lives at the project root, two levels above src/common/
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_allowed_origins: Optional[str] = Field(
        default=None
    )  # Comma-separated list of origins

    # Logging
    log_level: str = Field(default="INFO")

    # Translator backend
    translator_provider: str = Field(
        default="openai"
    )  # openai | deepseek | google | mock
    translator_model: str = Field(default="gpt-4o-mini")
    translator_api_key: Optional[str] = Field(default=None)
    translator_base_url: Optional[str] = Field(default=None)
    translator_temperature: float = Field(default=0.3)
    translator_timeout: float = Field(default=60.0)  # Seconds per request

    # Backend retry configuration (owned by the translator backend, not the scheduler)
    translator_max_retries: int = Field(
        default=0
    )  # Retry attempts after the initial try
    translator_retry_initial_delay: float = Field(default=2.0)
    translator_retry_max_delay: float = Field(default=60.0)
    translator_retry_exponential_base: int = Field(default=2)

    # Translation job defaults
    translation_mode: str = Field(default="single")  # single | multi
    translation_multi_line_batch_size: int = Field(default=3)
    translation_context_lines: int = Field(default=0)
    translation_enable_context: bool = Field(default=False)
    translation_enable_coherence: bool = Field(default=False)
    translation_parallel_count: Optional[int] = Field(default=None)

    # Prompt templates
    translation_prompt: str = Field(default=DEFAULT_TRANSLATION_PROMPT)
    translation_context_prompt: str = Field(default=DEFAULT_CONTEXT_PROMPT)
    translation_coherence_prompt: str = Field(default=DEFAULT_COHERENCE_PROMPT)
    translation_coherence_mode_prompt: str = Field(
        default=DEFAULT_COHERENCE_MODE_PROMPT
    )

    @field_validator("translator_provider", "translation_mode", mode="before")
    @classmethod
    def normalize_lowercase(cls, v: str) -> str:
        """
        Normalize enum-like string settings to lowercase.

        Args:
            v: Raw setting value

        Returns:
            Stripped lowercase string
        """
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("translation_parallel_count", mode="before")
    @classmethod
    def parse_optional_int(cls, v):
        """Treat an empty environment value as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def default_translation_config(self):
        """
        Build the default translation job configuration from settings.

        Returns:
            TranslationConfig populated from the translation_* settings
        """
        from translator.schemas import TranslationConfig

        return TranslationConfig(
            mode=self.translation_mode,
            multi_line_batch_size=self.translation_multi_line_batch_size,
            context_lines=self.translation_context_lines,
            enable_context=self.translation_enable_context,
            enable_coherence=self.translation_enable_coherence,
            parallel_count=self.translation_parallel_count,
        )

    def default_prompt_templates(self):
        """Build the default prompt templates from settings."""
        from translator.schemas import PromptTemplates

        return PromptTemplates(
            prompt=self.translation_prompt,
            context_prompt=self.translation_context_prompt,
            coherence_prompt=self.translation_coherence_prompt,
            coherence_mode_prompt=self.translation_coherence_mode_prompt,
        )


# Global settings instance
settings = Settings()
