"""
speechtxt/api/app.py
=====================
HTTP endpoints — speech-to-text upload and lookup

Responsibility:
    - Expose POST /speechtotext (multipart: audio, email, title)
    - Expose GET /speechtotext/{email}
    - Reject missing fields, disallowed MIME types and oversized uploads
    - Delegate processing to speechtxt.pipeline.run_pipeline
    - Map named pipeline failures to HTTP status codes

There is no authentication: anyone can submit or look up by email.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from speechtxt.api.services import build_services, close_services
from speechtxt.audio.errors import (
    AudioPipelineError,
    ChannelCountUnsupported,
    UnsupportedFormat,
)
from speechtxt.audio.types import ACCEPTED_MIME_TYPES, TranscriptionInput
from speechtxt.db.repository import PersistenceError
from speechtxt.pipeline import PipelineServices, run_pipeline
from speechtxt.settings import load_settings
from speechtxt.storage.gcs import StorageError
from speechtxt.stt.google_speech import RecognitionError

logger = logging.getLogger("speechtxt.api")


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


def _status_for(exc: Exception) -> int:
    if isinstance(exc, UnsupportedFormat):
        return 415
    if isinstance(exc, ChannelCountUnsupported):
        return 422
    if isinstance(exc, (RecognitionError, StorageError)):
        return 502
    return 500


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def _format_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):g} MB"
    return f"{num_bytes / 1024:g} KB"


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(
    services: PipelineServices | None = None,
    max_upload_bytes: int | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    When ``services`` is None they are built from settings at startup
    and closed at shutdown; injected services are left to the caller.
    """
    settings = None
    if services is None or max_upload_bytes is None:
        settings = load_settings()
    upload_limit = (
        max_upload_bytes if max_upload_bytes is not None else settings.audio.max_upload_bytes
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = False
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services(settings)
            owned = True
        try:
            yield
        finally:
            if owned:
                close_services(app.state.services)
                app.state.services = None

    app = FastAPI(
        title="Speech to Text",
        description="Upload audio, transcribe it with Google Speech, and look up transcripts by email.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.max_upload_bytes = upload_limit

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/speechtotext")
    async def create_transcription(
        request: Request,
        audio: UploadFile | None = File(None),
        email: str | None = Form(None),
        title: str | None = Form(None),
    ):
        """Accept an audio upload, transcribe it and store the result."""
        if not email or not title or audio is None:
            return JSONResponse(
                status_code=400,
                content={"error": "Email, title, and audio file are required"},
            )

        content_type = (audio.content_type or "").split(";", 1)[0].strip().lower()
        if content_type not in ACCEPTED_MIME_TYPES:
            return _failure(400, "Unsupported file format. Only WAV, OGG, MP3 are allowed.")

        limit = request.app.state.max_upload_bytes
        try:
            audio_bytes = await audio.read(limit + 1)
        except OSError:
            return _failure(400, "Failed to read uploaded file.")

        if len(audio_bytes) > limit:
            return _failure(413, f"File too large. Maximum size is {_format_size(limit)}.")

        logger.info(
            "Audio received: %s (%s, %.2f KB) from %s",
            audio.filename, content_type, len(audio_bytes) / 1024, email,
        )

        upload = TranscriptionInput(
            audio_bytes=audio_bytes,
            declared_mime_type=content_type,
            filename=audio.filename,
        )

        try:
            record = await asyncio.to_thread(
                run_pipeline, upload, email, title, request.app.state.services
            )
        except AudioPipelineError as exc:
            logger.warning("Audio rejected: %s", exc.message)
            return _failure(_status_for(exc), exc.message)
        except (RecognitionError, StorageError) as exc:
            logger.error("External service failed: %s", exc)
            return _failure(_status_for(exc), str(exc))
        except PersistenceError as exc:
            logger.error("Database write failed: %s", exc, exc_info=True)
            return _failure(500, "Failed to create transcription")
        except Exception as exc:
            logger.error("Pipeline unexpected error: %s", exc, exc_info=True)
            return _failure(500, "Failed to create transcription")

        return JSONResponse(
            status_code=201,
            content={
                "success": True,
                "message": "Transcription created successfully",
                "data": record.to_dict(),
            },
        )

    @app.get("/speechtotext/{email}")
    async def list_transcriptions(email: str, request: Request):
        """Return every transcription created by ``email``."""
        repository = request.app.state.services.repository
        try:
            records = await asyncio.to_thread(repository.find_by_email, email)
        except PersistenceError as exc:
            logger.error("Database read failed: %s", exc, exc_info=True)
            return _failure(500, "Failed to fetch transcriptions")

        if not records:
            return JSONResponse(
                status_code=404,
                content={"message": "No transcriptions found for this email"},
            )

        return JSONResponse(
            status_code=200,
            content={"success": True, "data": [r.to_dict() for r in records]},
        )

    return app
