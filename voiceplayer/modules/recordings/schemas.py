from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field

RecordingSourceName = Literal["primary", "legacy"]

class RecordingDescriptor(BaseModel):
    """Schema-agnostic view of one recording.

    Built fresh by the resolver for every lookup and never mutated afterwards.
    Serialising with ``public_dict()`` yields the camelCase payload the player
    page consumes.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    recording_id: str | None = Field(default=None, serialization_alias="recordingId")
    short_id: str = Field(serialization_alias="shortId")
    title: str
    file_url: str = Field(serialization_alias="fileUrl")
    duration_seconds: int | float = Field(default=0, ge=0, serialization_alias="duration")
    file_size_bytes: int = Field(default=0, ge=0, serialization_alias="fileSize")
    mime_type: str = Field(serialization_alias="mimeType")
    is_video: bool = Field(serialization_alias="isVideo")
    created_at: str = Field(default="", serialization_alias="createdAt")

    # legacy extras
    customer_name: str | None = Field(default=None, serialization_alias="customerName")
    product_name: str | None = Field(default=None, serialization_alias="productName")
    has_virtual_background: bool | None = Field(default=None, serialization_alias="hasVirtualBackground")
    background_name: str | None = Field(default=None, serialization_alias="backgroundName")

    # personalization (video greeting overlay)
    sender_name: str | None = Field(default=None, serialization_alias="senderName")
    occasion: str | None = None
    custom_message: str | None = Field(default=None, serialization_alias="customMessage")

    source: RecordingSourceName = Field(default="primary", exclude=True)

    def public_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PlaybackOut(BaseModel):
    success: Literal[True] = True
    data: dict[str, Any]


class PlaybackErrorOut(BaseModel):
    success: Literal[False] = False
    error: str
