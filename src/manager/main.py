"""FastAPI application for the subtitle translation service."""

from contextlib import asynccontextmanager
from typing import Any, Dict
from uuid import UUID

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from common.config import settings
from common.logging_config import setup_service_logging
from common.subtitle_parser import UnsupportedFormatError
from manager.helpers import stream_translation_events
from manager.job_registry import job_registry
from manager.schemas import CancelResponse, HealthResponse, TranslateRequest
from translator.subtitle_service import SubtitleService
from translator.translation_service import create_translator

# Configure logging
service_logger = setup_service_logging("manager", enable_file_logging=False)
logger = service_logger.logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info("Starting subtitle translation API...")
    yield
    job_registry.cancel_all()
    logger.info("Subtitle translation API stopped")


# Create FastAPI application
app = FastAPI(
    title="Subtitle Translation API",
    description="API for translating subtitle files with streamed progress",
    version="1.0.0",
    lifespan=lifespan,
)

# Parse comma-separated origins from config
allowed_origins = (
    [origin.strip() for origin in settings.cors_allowed_origins.split(",")]
    if settings.cors_allowed_origins
    else ["http://localhost:3000"]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/", response_model=Dict[str, Any])
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Subtitle Translation API",
        "version": "1.0.0",
        "docs": "/docs",
        "providers": ["openai", "deepseek", "google", "mock"],
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Simple health check endpoint."""
    return HealthResponse(active_jobs=len(job_registry))


@app.post("/api/translate")
async def translate_subtitle(request: TranslateRequest):
    """
    Translate a subtitle file, streaming progress as NDJSON.

    Request validation and format checks fail with 400 before any stream is
    opened. After that every outcome, including errors, is reported as a
    stream event.
    """
    provider = (request.provider or settings.translator_provider or "").strip().lower()
    model = request.model or settings.translator_model
    if not provider or not model:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing translation provider or model",
        )

    api_key = request.api_key or settings.translator_api_key
    if provider != "mock" and not api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing API key for provider {provider}",
        )

    service = SubtitleService()
    try:
        document = service.parse_subtitle(request.content, request.filename)
        if service.find_generator(request.output_format) is None:
            raise UnsupportedFormatError(request.output_format, action="generate")
        translator = create_translator(
            provider=provider,
            model=model,
            api_key=api_key,
            base_url=request.base_url,
            templates=request.prompt_templates(),
            custom_prompt=request.custom_prompt,
        )
    except ValueError as e:
        logger.warning(f"Rejected translation request for {request.filename}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    service.set_translator(translator)
    logger.info(
        f"📥 Translation request: {request.filename} ({len(document)} entries, "
        f"{request.source_language} -> {request.target_language}, {translator.name})"
    )

    return StreamingResponse(
        stream_translation_events(service, document, request, job_registry),
        media_type="application/x-ndjson",
    )


@app.post("/api/jobs/{job_id}/cancel", response_model=CancelResponse)
async def cancel_job(job_id: UUID):
    """Request cancellation of a running translation job."""
    if not job_registry.cancel(job_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found",
        )
    return CancelResponse(job_id=str(job_id))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "manager.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
