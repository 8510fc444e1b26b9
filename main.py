"""
FastAPI application for stylized avatar generation.
"""
import asyncio
import logging
import mimetypes
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import AsyncGenerator, List, Optional

from fastapi import Depends, FastAPI, File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import get_settings
from models import (
    GenerateAvatarErrorResponse,
    GenerateAvatarRequest,
    GenerateAvatarResponse,
    ProviderInfo,
    ProvidersResponse,
    StyleInfo,
)
from services import (
    FallbackOrchestrator,
    InvalidInputError,
    PixelTransformEngine,
    ProviderRegistry,
    RequestFacade,
    StyleCatalog,
)
from services.request_facade import GENERATION_FAILED_MESSAGE, INVALID_IMAGE_MESSAGE

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)
# Reduce noisy per-request logs from httpx/httpcore (Replicate polling in particular).
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif"}


@lru_cache
def get_registry() -> ProviderRegistry:
    return ProviderRegistry.from_settings(get_settings())


@lru_cache
def get_catalog() -> StyleCatalog:
    return StyleCatalog(default_style=get_settings().default_style)


def get_facade() -> RequestFacade:
    settings = get_settings()
    orchestrator = FallbackOrchestrator(
        registry=get_registry(),
        catalog=get_catalog(),
        engine=PixelTransformEngine(canvas_size=settings.output_canvas_size),
    )
    return RequestFacade(orchestrator, max_upload_bytes=settings.max_upload_bytes)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Avatar service starting")
    configured = [d.provider_id for d in get_registry().configured()]
    if configured:
        logger.info("Providers (priority order): %s", ", ".join(configured))
    else:
        logger.warning("No image providers configured; every request will use the local effect")
    yield
    logger.info("Avatar service shutting down")


app = FastAPI(
    title="Anubis Avatar",
    description="Turn a photo into a stylized avatar, with a local fallback when AI providers fail",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = GenerateAvatarErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# ── Health / catalog ─────────────────────────────────────────

@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for uptime checks."""
    return JSONResponse({"status": "ok"})


@app.get("/api/styles", response_model=List[StyleInfo])
async def list_styles(catalog: StyleCatalog = Depends(get_catalog)) -> List[StyleInfo]:
    return [
        StyleInfo(
            id=profile.style_id.name,
            label=profile.label,
            accent_color=profile.accent_hex,
            frame_enabled=profile.frame_enabled,
            is_default=profile.style_id == catalog.default_style,
        )
        for profile in catalog.styles()
    ]


@app.get("/api/providers", response_model=ProvidersResponse)
async def list_providers(registry: ProviderRegistry = Depends(get_registry)) -> ProvidersResponse:
    """Provider order and configuration. Probes run in a worker thread (network)."""
    first = await asyncio.to_thread(registry.first_available)
    return ProvidersResponse(
        providers=[
            ProviderInfo(id=d.provider_id, priority=d.priority, configured=d.is_configured)
            for d in registry.candidates()
        ],
        first_available=first.provider_id if first else None,
    )


# ── Generation API ───────────────────────────────────────────

@app.post("/api/generate-avatar", response_model=GenerateAvatarResponse)
async def generate_avatar(
    payload: GenerateAvatarRequest,
    facade: RequestFacade = Depends(get_facade),
):
    try:
        return await facade.generate_avatar(payload)
    except InvalidInputError as e:
        logger.info("Rejected avatar request: %s", e)
        return _error_response(400, INVALID_IMAGE_MESSAGE, str(e))
    except Exception as e:
        logger.exception("Avatar generation error")
        return _error_response(500, GENERATION_FAILED_MESSAGE, str(e))


@app.post("/api/generate-avatar/upload", response_model=GenerateAvatarResponse)
async def generate_avatar_upload(
    file: UploadFile = File(...),
    style: Optional[str] = Form(None),
    prompt: Optional[str] = Form(None),
    facade: RequestFacade = Depends(get_facade),
):
    """Multipart variant: the photo is uploaded as a file instead of a data URI."""
    if file.filename:
        ext = Path(file.filename).suffix.lower()
        if ext and ext not in IMAGE_EXTENSIONS:
            return _error_response(400, INVALID_IMAGE_MESSAGE, f"Unsupported format: {ext}")

    # Some clients send application/octet-stream; fall back to the extension.
    mime_type = file.content_type or ""
    if not mime_type.startswith("image/"):
        mime_type = mimetypes.guess_type(file.filename or "")[0] or mime_type or "application/octet-stream"

    content = await file.read()
    try:
        request = facade.build_request(content, mime_type, style, prompt)
        return await facade.generate(request)
    except InvalidInputError as e:
        logger.info("Rejected avatar upload %s: %s", file.filename, e)
        return _error_response(400, INVALID_IMAGE_MESSAGE, str(e))
    except Exception as e:
        logger.exception("Avatar generation error")
        return _error_response(500, GENERATION_FAILED_MESSAGE, str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8001,
        reload=True,
    )
