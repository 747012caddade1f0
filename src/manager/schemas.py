"""Request and response schemas for the translation API."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from common.config import settings
from translator.schemas import PromptTemplates, TranslationConfig


class TranslateRequest(BaseModel):
    """Schema for a subtitle translation request."""

    content: str = Field(..., description="Raw subtitle file content")
    filename: str = Field(..., description="Original filename, used to pick a parser")
    source_language: str = Field(default="en")
    target_language: str = Field(default="zh")
    output_format: str = Field(default="srt")

    provider: Optional[str] = Field(
        default=None, description="openai, deepseek, google or mock"
    )
    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    prompt: Optional[str] = None
    context_prompt: Optional[str] = None
    coherence_prompt: Optional[str] = None
    coherence_mode_prompt: Optional[str] = None
    custom_prompt: Optional[str] = Field(
        default=None, description="One-off instructions for this run"
    )

    options: TranslationConfig = Field(
        default_factory=lambda: settings.default_translation_config()
    )

    @field_validator("filename")
    @classmethod
    def validate_filename_non_empty(cls, v: str) -> str:
        """
        Validate filename is non-empty.

        Raises:
            ValueError: If filename is empty
        """
        if not v or not v.strip():
            raise ValueError("filename must be a non-empty string")
        return v.strip()

    @field_validator("source_language", "target_language", "output_format")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("language codes and output format must be non-empty")
        return v.strip()

    def prompt_templates(self) -> PromptTemplates:
        """Templates from the request, falling back to configured defaults."""
        defaults = settings.default_prompt_templates()
        return PromptTemplates(
            prompt=self.prompt or defaults.prompt,
            context_prompt=self.context_prompt or defaults.context_prompt,
            coherence_prompt=self.coherence_prompt or defaults.coherence_prompt,
            coherence_mode_prompt=self.coherence_mode_prompt
            or defaults.coherence_mode_prompt,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    active_jobs: int = 0


class CancelResponse(BaseModel):
    """Acknowledgement for a cancellation request."""

    job_id: str
    cancelled: bool = True
