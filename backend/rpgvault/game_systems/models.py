from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Index, JSON
from ..shared.db import Base, utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class GameSystem(Base):
    __tablename__ = "game_systems"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # 파생 시스템: 부모가 있으면 삭제 불가
    parent_system_id: Mapped[str | None] = mapped_column(
        ForeignKey("game_systems.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    validation_schema: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sync_with_parent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (Index("ix_game_systems_owner_name", "owner_id", "name"),)
