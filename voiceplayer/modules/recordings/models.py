from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, BigInteger, Float, Boolean, TIMESTAMP, text
from voiceplayer.core.base import Base

# Both tables are written by the recorder app; this service only reads them.

class Recording(Base):
    """Current schema ("source A"): file lives in the public bucket under file_path."""
    __tablename__ = "recordings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    play_slug: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    product_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    duration_seconds: Mapped[float | None] = mapped_column(Float, nullable=True)
    size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    type: Mapped[str | None] = mapped_column(String(32), nullable=True)  # "video" | "audio"
    created_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=True
    )


class VoiceRecording(Base):
    """Legacy schema ("source B"): file_url is already absolute."""
    __tablename__ = "voice_recordings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    recording_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    short_url_slug: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    product_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    duration_seconds: Mapped[float | None] = mapped_column(Float, nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    media_type: Mapped[str | None] = mapped_column(String(128), nullable=True)  # "video", "audio" or a mime type
    has_virtual_background: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    background_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=True
    )
