"""Error handling utilities for translation jobs."""

import logging
from typing import Any, Dict

from common.subtitle_parser import UnsupportedFormatError
from translator.errors import TranslationCallFailedError, TranslationFailedError

logger = logging.getLogger(__name__)


def build_error_event(error: Exception) -> Dict[str, Any]:
    """
    Log a job error and describe it as a stream event.

    Cancellation is not an error and never reaches this function.

    Args:
        error: Exception that ended the job

    Returns:
        Event payload with ``type`` set to ``error``
    """
    error_message = str(error)

    if isinstance(error, UnsupportedFormatError):
        logger.error(f"❌ Unsupported subtitle format: {error_message}")
        error_message = f"Unsupported format: {error.subject}"
    elif isinstance(error, TranslationFailedError):
        logger.error(f"❌ Translation job failed: {error_message}")
        error_message = f"Translation failed: {error.original_error}"
    elif isinstance(error, TranslationCallFailedError):
        logger.error(f"❌ Translator call failed: {error_message}")
        error_message = f"Translation failed: {error.reason}"
    elif isinstance(error, ValueError):
        logger.error(f"❌ Invalid translation request: {error_message}")
        error_message = f"Invalid request: {error_message}"
    else:
        logger.error(
            f"❌ Unexpected error processing translation: {error_message}",
            exc_info=True,
        )
        error_message = f"Translation error: {error_message}"

    return {"type": "error", "error": error_message}
