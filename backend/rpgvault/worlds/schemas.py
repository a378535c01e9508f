from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, HttpUrl, field_validator

from ..game_systems.schemas import GameSystemSummary
from ..shared.schemas import ApiModel


class WorldCreate(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    game_system_id: str
    image_url: Optional[HttpUrl] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("World name is required")
        return v


class WorldUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    image_url: Optional[HttpUrl] = None
    session_data: Optional[dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("World name is required")
        return v


class WorldOut(ApiModel):
    id: str
    name: str
    image_url: Optional[str] = None
    game_system: GameSystemSummary
    session_data: dict[str, Any] = Field(default_factory=dict)
    last_accessed_at: datetime
    created_at: datetime


class LaunchOut(ApiModel):
    world_id: str
    launch_url: str
    last_accessed_at: datetime
