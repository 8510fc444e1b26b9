"""
Entry point used by the HTTP layer: validates the incoming payload shape,
builds a GenerationRequest and hands it to the orchestrator.
"""
import base64
import binascii
import logging
import re
from typing import Optional, Tuple

from models.generation import GenerationRequest, SourceImage
from models.schemas import GenerateAvatarRequest, GenerateAvatarResponse

from .imaging import InvalidInputError
from .orchestrator import FallbackOrchestrator

logger = logging.getLogger(__name__)

INVALID_IMAGE_MESSAGE = "Could not read your image"
GENERATION_FAILED_MESSAGE = "Failed to generate avatar"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)


def parse_image_payload(value: str, declared_mime: Optional[str] = None) -> Tuple[bytes, str]:
    """Accept a data URI or bare base64. Returns (bytes, mime_type)."""
    value = (value or "").strip()
    if not value:
        raise InvalidInputError("User image is required")

    mime_type = declared_mime or "image/png"
    match = _DATA_URI_RE.match(value)
    if match:
        mime_type = match.group("mime") or mime_type
        value = match.group("data")
    elif value.startswith("data:"):
        raise InvalidInputError("Only base64 data URIs are supported")

    try:
        data = base64.b64decode("".join(value.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInputError("Image is not valid base64") from e
    return data, mime_type.lower()


class RequestFacade:
    def __init__(self, orchestrator: FallbackOrchestrator, max_upload_bytes: int = 10 * 1024 * 1024):
        self.orchestrator = orchestrator
        self.max_upload_bytes = max_upload_bytes

    def build_request(
        self,
        data: bytes,
        mime_type: str,
        style: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> GenerationRequest:
        if not data:
            raise InvalidInputError("User image is required")
        if len(data) > self.max_upload_bytes:
            raise InvalidInputError(f"Image must be under {self.max_upload_bytes // (1024 * 1024)} MB")
        if not mime_type.startswith("image/"):
            raise InvalidInputError(f"Unsupported file type: {mime_type}")
        return GenerationRequest(
            source_image=SourceImage(data=data, mime_type=mime_type),
            style=(style or "").strip() or None,
            prompt=(prompt or "").strip() or None,
        )

    async def generate(self, request: GenerationRequest) -> GenerateAvatarResponse:
        result = await self.orchestrator.generate(request)
        return GenerateAvatarResponse(
            image=base64.b64encode(result.image).decode("ascii"),
            mime_type=result.content_type,
            produced_by=result.produced_by,
            prompt=result.prompt_used,
        )

    async def generate_avatar(self, payload: GenerateAvatarRequest) -> GenerateAvatarResponse:
        """Handle the JSON body of POST /api/generate-avatar. Raises InvalidInputError."""
        data, mime_type = parse_image_payload(payload.user_image, payload.mime_type)
        request = self.build_request(data, mime_type, payload.style, payload.prompt)
        return await self.generate(request)
