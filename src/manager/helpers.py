"""Helper functions for the translation endpoints."""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict

from common.subtitle_parser import SubtitleDocument
from manager.job_registry import JobRegistry, RegisteredJob
from manager.schemas import TranslateRequest
from translator.error_handler import build_error_event
from translator.errors import TranslationCancelledError
from translator.progress import ProgressSnapshot
from translator.subtitle_service import SubtitleService, build_output_filename

logger = logging.getLogger(__name__)

_STREAM_END = object()


def encode_event(event: Dict[str, Any]) -> str:
    """Serialize one stream event as an NDJSON line."""
    return json.dumps(event, ensure_ascii=False) + "\n"


def build_progress_event(snapshot: ProgressSnapshot) -> Dict[str, Any]:
    return {"type": "progress", **snapshot.to_dict()}


async def run_translation_job(
    service: SubtitleService,
    document: SubtitleDocument,
    request: TranslateRequest,
    job: RegisteredJob,
    queue: "asyncio.Queue[Any]",
    registry: JobRegistry,
) -> None:
    """
    Run one translation job, pushing every outcome onto ``queue``.

    The queue always receives exactly one terminal event (result, cancelled
    or error) followed by the end-of-stream marker.
    """
    try:
        translated = await service.translate_subtitle(
            document,
            request.source_language,
            request.target_language,
            config=request.options,
            on_progress=lambda snapshot: queue.put_nowait(
                build_progress_event(snapshot)
            ),
            abort_signal=job.abort_signal,
        )
        content = service.generate_subtitle(translated, request.output_format)
        queue.put_nowait(
            {
                "type": "result",
                "success": True,
                "content": content,
                "filename": build_output_filename(
                    request.filename, request.output_format
                ),
            }
        )
        logger.info(f"✅ Job {job.job_id} completed ({len(document)} entries)")
    except TranslationCancelledError as e:
        snapshot = e.snapshot
        partial_content = ""
        if e.partial_document is not None:
            partial_content = service.generate_subtitle(
                e.partial_document, request.output_format
            )
        queue.put_nowait(
            {
                "type": "cancelled",
                "completed": snapshot.completed if snapshot else 0,
                "total": snapshot.total if snapshot else len(document),
                "content": partial_content,
                "filename": build_output_filename(
                    request.filename, request.output_format
                ),
            }
        )
        logger.info(f"🛑 Job {job.job_id} cancelled")
    except Exception as e:
        queue.put_nowait(build_error_event(e))
    finally:
        registry.remove(job.job_id)
        queue.put_nowait(_STREAM_END)
        if service.translator is not None:
            await service.translator.aclose()


async def stream_translation_events(
    service: SubtitleService,
    document: SubtitleDocument,
    request: TranslateRequest,
    registry: JobRegistry,
) -> AsyncIterator[str]:
    """
    Stream a translation job as NDJSON events.

    Closing the stream before the job finishes (client disconnect) aborts
    the job.
    """
    job = registry.register()
    queue: "asyncio.Queue[Any]" = asyncio.Queue()

    job.task = asyncio.create_task(
        run_translation_job(service, document, request, job, queue, registry)
    )

    finished = False
    try:
        yield encode_event({"type": "job", "job_id": str(job.job_id)})
        yield encode_event(
            {"type": "progress", "percent": 0, "completed": 0, "total": len(document)}
        )

        while True:
            event = await queue.get()
            if event is _STREAM_END:
                finished = True
                break
            yield encode_event(event)
    finally:
        if not finished:
            logger.info(f"Client went away, aborting job {job.job_id}")
            job.abort_signal.abort()
