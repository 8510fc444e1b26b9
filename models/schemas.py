from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateAvatarRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    user_image: str = Field(default="", alias="userImage", description="Data URI or bare base64 of the photo")
    mime_type: Optional[str] = Field(None, alias="mimeType", description="MIME type when userImage is bare base64")
    style: Optional[str] = Field(None, description="Style name, e.g. 'Dark Gold'")
    prompt: Optional[str] = Field(None, description="Extra prompt text appended to the avatar instruction")


class GenerateAvatarResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    success: bool = True
    image: str = Field(..., description="Base64 encoded PNG")
    mime_type: str = Field("image/png", alias="mimeType")
    produced_by: str = Field(..., alias="producedBy", description="'provider:<id>' or 'local-fallback'")
    prompt: str = ""


class GenerateAvatarErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[str] = None


class StyleInfo(BaseModel):
    id: str
    label: str
    accent_color: str = Field(..., alias="accentColor")
    frame_enabled: bool = Field(True, alias="frameEnabled")
    is_default: bool = Field(False, alias="isDefault")

    model_config = ConfigDict(populate_by_name=True)


class ProviderInfo(BaseModel):
    id: str
    priority: int
    configured: bool


class ProvidersResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    providers: List[ProviderInfo]
    first_available: Optional[str] = Field(None, alias="firstAvailable")
