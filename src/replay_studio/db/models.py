"""SQLAlchemy ORM models for the rehydration store."""

from datetime import datetime
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class SystemStatusModel(Base):
    """Per-user system status row."""

    __tablename__ = "system_status"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, unique=True, index=True)
    is_running: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    current_task: Mapped[str | None] = mapped_column(String(255), nullable=True)
    replays_found: Mapped[int | None] = mapped_column(Integer, nullable=True)
    videos_uploaded: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    uptime: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )


class ReplayModel(Base):
    """Discovered replay row."""

    __tablename__ = "replays"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, index=True)
    player_name: Mapped[str] = mapped_column(String(255), nullable=False)
    champion: Mapped[str] = mapped_column(String(100), nullable=False)
    rank_tier: Mapped[str | None] = mapped_column(String(100), nullable=True)
    kda: Mapped[str | None] = mapped_column(String(50), nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # seconds
    game_mode: Mapped[str | None] = mapped_column(String(100), nullable=True)
    patch_version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    download_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    upload_jobs: Mapped[list["UploadJobModel"]] = relationship(
        "UploadJobModel", back_populates="replay"
    )


class UploadJobModel(Base):
    """Upload job row."""

    __tablename__ = "upload_jobs"

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[PyUUID] = mapped_column(Uuid, nullable=False, index=True)
    replay_id: Mapped[PyUUID | None] = mapped_column(
        Uuid, ForeignKey("replays.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    player_name: Mapped[str] = mapped_column(String(255), nullable=False)
    champion: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    progress: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # seconds
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)  # bytes
    thumbnail_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    estimated_time: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    youtube_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # Relationships
    replay: Mapped["ReplayModel | None"] = relationship(
        "ReplayModel", back_populates="upload_jobs"
    )
