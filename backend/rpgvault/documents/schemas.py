from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..game_systems.schemas import GameSystemSummary
from ..shared.schemas import ApiModel
from .models import DocumentType


class DocumentUpdate(ApiModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    tags: Optional[List[str]] = None


class DocumentOut(ApiModel):
    id: str
    game_system_id: str
    filename: str
    display_name: str
    type: DocumentType
    file_size: int
    mime_type: str
    uploaded_by: str
    checksum: str
    validation_errors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    version: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DocumentDetailOut(DocumentOut):
    game_system: Optional[GameSystemSummary] = None


def parse_tags(raw: Optional[str]) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c']"""
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]
