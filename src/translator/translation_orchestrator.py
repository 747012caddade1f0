"""Translation orchestration: mode dispatch, bounded concurrency, cancellation."""

import asyncio
import logging
import math
from enum import Enum
from typing import Any, Dict, List, Optional

from common.subtitle_parser import SubtitleDocument
from translator.context_window import build_context_window
from translator.errors import TranslationCancelledError, TranslationFailedError
from translator.progress import ProgressReporter, ProgressSink
from translator.schemas import (
    BATCH_SEPARATOR,
    TranslationConfig,
    TranslationMode,
    UnitContext,
)
from translator.translation_service import Translator

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    """Lifecycle of a translation job."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


def build_batch_instruction(count: int, coherence: bool = False) -> str:
    """
    Instruction sent ahead of a packed multi-line request.

    Args:
        count: Number of units packed into the request
        coherence: Whether the units are rewritten instead of translated

    Returns:
        Instruction describing the separator and expected output cardinality
    """
    verb = "Rewrite" if coherence else "Translate"
    return (
        f"{verb} each of the following {count} subtitle segments separately. "
        f'Separate the results strictly with "{BATCH_SEPARATOR}" and output '
        f"exactly {count} segments in the same order as the input. "
        f"Output only the resulting text, without numbering or explanations."
    )


def pack_batch(texts: List[str]) -> str:
    """Join unit texts with the batch separator on its own line."""
    return f"\n{BATCH_SEPARATOR}\n".join(texts)


class TranslationJob:
    """State of one translation run: positional result slots and counters."""

    def __init__(
        self,
        document: SubtitleDocument,
        source_language: str,
        target_language: str,
        config: TranslationConfig,
        reporter: ProgressReporter,
        abort_signal: Optional[Any] = None,
    ):
        self.document = document
        self.texts = document.texts
        self.total = len(self.texts)
        self.source_language = source_language
        self.target_language = target_language
        self.config = config
        self.reporter = reporter
        self.abort_signal = abort_signal

        self.slots: List[Optional[str]] = [None] * self.total
        self.completed = 0
        self.last_position: Optional[int] = None
        self.fallback_positions: List[int] = []
        self.state = JobState.IDLE

    @property
    def aborted(self) -> bool:
        return bool(self.abort_signal is not None and self.abort_signal.aborted)

    def resolve(self, position: int, translated: Optional[str]) -> None:
        """
        Write the final text for a slot.

        Empty or missing translations fall back to the source text.
        """
        text = (translated or "").strip()
        if not text:
            text = self.texts[position]
            self.fallback_positions.append(position)
        self.slots[position] = text

    def emit_progress(self) -> None:
        self.reporter.emit(self.slots, self.completed, self.last_position)

    def cancelled_error(self) -> TranslationCancelledError:
        snapshot = self.reporter.snapshot(
            self.slots, self.completed, self.last_position
        )
        return TranslationCancelledError(
            snapshot=snapshot,
            partial_document=snapshot.to_partial_document(self.document.source_format),
        )

    def to_document(self) -> SubtitleDocument:
        """Translated document in original positional order."""
        entries = [
            entry.with_text(text if text is not None else entry.text)
            for entry, text in zip(self.document.entries, self.slots)
        ]
        return SubtitleDocument(
            entries=entries, source_format=self.document.source_format
        )


class TranslationOrchestrator:
    """Schedules translator calls for a subtitle document."""

    def __init__(self, translator: Translator):
        self.translator = translator

    async def translate_document(
        self,
        document: SubtitleDocument,
        source_language: str,
        target_language: str,
        config: Optional[TranslationConfig] = None,
        on_progress: Optional[ProgressSink] = None,
        abort_signal: Optional[Any] = None,
    ) -> SubtitleDocument:
        """
        Translate every entry of a document.

        Args:
            document: Parsed subtitle document
            source_language: Source language code
            target_language: Target language code
            config: Scheduling options; always re-clamped before use
            on_progress: Called synchronously with a ProgressSnapshot after
                every unit (single mode) or batch (multi mode)
            abort_signal: Object with a boolean ``aborted`` attribute, polled
                before admitting work and after each completion

        Returns:
            New document with translated text, in original positional order

        Raises:
            TranslationCancelledError: Cancellation was observed
            TranslationFailedError: A multi-line batch call failed
        """
        config = (config or TranslationConfig()).normalized()
        job = TranslationJob(
            document,
            source_language,
            target_language,
            config,
            ProgressReporter(document.entries, on_progress),
            abort_signal,
        )
        return await self.run(job)

    async def run(self, job: TranslationJob) -> SubtitleDocument:
        """Run a prepared job through its state machine."""
        if job.aborted:
            job.state = JobState.CANCELLED
            raise job.cancelled_error()

        if job.total == 0:
            job.state = JobState.COMPLETED
            return job.to_document()

        config = job.config
        job.state = JobState.RUNNING
        logger.info(
            f"🚀 Translating {job.total} entries with {self.translator.name} "
            f"({job.source_language} -> {job.target_language}, mode={config.mode.value}, "
            f"batch={config.multi_line_batch_size}, context={config.context_lines}, "
            f"coherence={config.enable_coherence}, parallel={config.parallel_count or 1})"
        )

        try:
            if config.mode == TranslationMode.MULTI:
                await self._translate_multi_line(job)
            elif config.parallel_count:
                await self._translate_parallel(job)
            else:
                await self._translate_sequential(job)
        except TranslationCancelledError:
            job.state = JobState.CANCELLED
            logger.info(
                f"🛑 Translation cancelled after {job.completed}/{job.total} entries"
            )
            raise
        except Exception:
            job.state = JobState.FAILED
            raise

        job.state = JobState.COMPLETED
        if job.fallback_positions:
            logger.warning(
                f"⚠️  {len(job.fallback_positions)} entries kept their source text"
            )
        logger.info(f"✅ Translated {job.total} entries")
        return job.to_document()

    async def _translate_multi_line(self, job: TranslationJob) -> None:
        size = job.config.multi_line_batch_size
        coherence = job.config.enable_coherence
        total_batches = math.ceil(job.total / size)

        for batch_index, start in enumerate(range(0, job.total, size)):
            if job.aborted:
                raise job.cancelled_error()

            end = min(start + size, job.total)
            batch = job.texts[start:end]
            logger.info(
                f"🔄 Translating batch {batch_index + 1}/{total_batches} ({len(batch)} entries)"
            )

            unit_context = UnitContext(
                coherence=coherence,
                instruction=build_batch_instruction(len(batch), coherence),
            )
            try:
                translated = await self.translator.translate(
                    pack_batch(batch),
                    job.source_language,
                    job.target_language,
                    unit_context,
                )
            except Exception as e:
                # A failed batch aborts the job, unlike single-line mode
                # which keeps the source text for a failed unit.
                logger.error(
                    f"❌ Batch {batch_index + 1}/{total_batches} failed: {e}"
                )
                raise TranslationFailedError(e, batch_index, total_batches) from e

            parts = translated.split(BATCH_SEPARATOR)
            if len(parts) != len(batch):
                logger.warning(
                    f"⚠️  Batch {batch_index + 1}/{total_batches}: expected {len(batch)} "
                    f"segments, got {len(parts)}"
                )

            for offset in range(len(batch)):
                job.resolve(start + offset, parts[offset] if offset < len(parts) else None)

            job.completed = end
            job.last_position = end - 1
            job.emit_progress()

    async def _translate_sequential(self, job: TranslationJob) -> None:
        for position in range(job.total):
            if job.aborted:
                raise job.cancelled_error()

            translated = await self._translate_unit(job, position)
            job.resolve(position, translated)
            job.completed += 1
            job.last_position = position
            job.emit_progress()

    async def _translate_parallel(self, job: TranslationJob) -> None:
        """
        Keep at most ``parallel_count`` units in flight.

        Slots are written only here, between awaits, from task results, so
        completion order never affects placement. Once cancellation is seen
        no more units are admitted; units already in flight are awaited and
        their results discarded.
        """
        limit = job.config.parallel_count
        in_flight: Dict["asyncio.Task[Optional[str]]", int] = {}
        next_position = 0
        cancelled = False

        try:
            while True:
                while not cancelled and next_position < job.total and len(in_flight) < limit:
                    if job.aborted:
                        cancelled = True
                        break
                    task = asyncio.create_task(self._translate_unit(job, next_position))
                    in_flight[task] = next_position
                    next_position += 1

                if cancelled or not in_flight:
                    break

                done, _ = await asyncio.wait(
                    in_flight, return_when=asyncio.FIRST_COMPLETED
                )
                for task in sorted(done, key=in_flight.get):
                    position = in_flight.pop(task)
                    if cancelled:
                        continue
                    job.resolve(position, task.result())
                    job.completed += 1
                    job.last_position = position
                    job.emit_progress()
                    if job.aborted:
                        cancelled = True
        except BaseException:
            for task in in_flight:
                task.cancel()
            raise

        if in_flight:
            logger.info(f"Waiting for {len(in_flight)} in-flight entries to finish")
            await asyncio.gather(*in_flight, return_exceptions=True)

        if cancelled and job.completed < job.total:
            raise job.cancelled_error()

    async def _translate_unit(self, job: TranslationJob, position: int) -> Optional[str]:
        """
        Translate one unit, absorbing capability failures.

        Returns:
            Translated text, or None when the call failed
        """
        config = job.config
        window_size = config.effective_context_lines

        context = None
        if window_size > 0:
            context = build_context_window(
                job.texts, position, window_size, config.enable_coherence
            ).render()

        unit_context = UnitContext(
            context=context,
            enable_context=config.enable_context,
            coherence=config.enable_coherence,
        )
        try:
            return await self.translator.translate(
                job.texts[position],
                job.source_language,
                job.target_language,
                unit_context,
            )
        except Exception as e:
            logger.warning(
                f"⚠️  Entry {position + 1}/{job.total} failed, keeping source text: {e}"
            )
            return None
