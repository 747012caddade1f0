"""Error taxonomy for translation jobs."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from common.subtitle_parser import SubtitleDocument
    from translator.progress import ProgressSnapshot


class TranslationError(Exception):
    """Base class for translation errors."""


class TranslationCallFailedError(TranslationError):
    """A single call to the translator capability failed."""

    def __init__(self, reason: str, provider: Optional[str] = None):
        self.reason = reason
        self.provider = provider
        prefix = f"{provider} " if provider else ""
        super().__init__(f"{prefix}translation call failed: {reason}")


class TranslationFailedError(TranslationError):
    """
    A translation job aborted because of an unrecoverable error.

    Raised in multi-line mode when a batch call fails. The originating
    exception is available as ``original_error`` and ``__cause__``.
    """

    def __init__(
        self,
        original_error: BaseException,
        batch_index: Optional[int] = None,
        total_batches: Optional[int] = None,
    ):
        self.original_error = original_error
        self.batch_index = batch_index
        self.total_batches = total_batches

        message = f"Translation failed: {original_error}"
        if batch_index is not None and total_batches is not None:
            message += f" (batch {batch_index + 1}/{total_batches})"
        super().__init__(message)


class TranslationCancelledError(TranslationError):
    """
    A translation job stopped because cancellation was requested.

    This is an expected stop, not a failure. ``snapshot`` holds the last
    progress state and ``partial_document`` the entries completed so far.
    """

    def __init__(
        self,
        snapshot: Optional["ProgressSnapshot"] = None,
        partial_document: Optional["SubtitleDocument"] = None,
    ):
        self.snapshot = snapshot
        self.partial_document = partial_document
        completed = snapshot.completed if snapshot else 0
        total = snapshot.total if snapshot else 0
        super().__init__(f"Translation cancelled ({completed}/{total} completed)")


class PlaceholderResolutionMismatch(TranslationError):
    """A recognized prompt placeholder could not be resolved."""

    def __init__(self, placeholder: str):
        self.placeholder = placeholder
        super().__init__(f"Unresolved prompt placeholder: {{{placeholder}}}")
