from __future__ import annotations
import enum
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    Enum as SAEnum,
)
from ..shared.db import Base, utcnow
from ..game_systems.models import new_id


class DocumentType(str, enum.Enum):
    JSON = "JSON"
    PDF = "PDF"
    MARKDOWN = "MARKDOWN"


# 확장자 -> (종류, mime)
EXTENSION_TYPES: dict[str, tuple[DocumentType, str]] = {
    "json": (DocumentType.JSON, "application/json"),
    "pdf": (DocumentType.PDF, "application/pdf"),
    "md": (DocumentType.MARKDOWN, "text/markdown"),
    "markdown": (DocumentType.MARKDOWN, "text/markdown"),
}


class Document(Base):
    __tablename__ = "documents"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    game_system_id: Mapped[str] = mapped_column(
        ForeignKey("game_systems.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[DocumentType] = mapped_column(
        SAEnum(DocumentType, name="document_type_enum"), nullable=False
    )
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)  # 저장소 기준 상대경로
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    uploaded_by: Mapped[str] = mapped_column(String(64), nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)  # sha256 hex
    validation_errors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    __table_args__ = (Index("ix_documents_system_active", "game_system_id", "is_active"),)
