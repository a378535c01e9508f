from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, HttpUrl

from ..locks.schemas import LockOut
from ..shared.schemas import ApiModel


class GameSystemCreate(ApiModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    image_url: Optional[HttpUrl] = None
    parent_system_id: Optional[str] = None
    sync_with_parent: bool = True
    validation_schema: Optional[dict[str, Any]] = None


class GameSystemUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    image_url: Optional[HttpUrl] = None
    sync_with_parent: Optional[bool] = None
    validation_schema: Optional[dict[str, Any]] = None


class GameSystemOut(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    owner_id: str
    parent_system_id: Optional[str] = None
    validation_schema: Optional[dict[str, Any]] = None
    is_public: bool
    sync_with_parent: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


class GameSystemDetailOut(GameSystemOut):
    lock: Optional[LockOut] = None


# 월드 목록 등에 끼워 넣는 요약
class GameSystemSummary(ApiModel):
    id: str
    name: str
    default_image_url: Optional[str] = None
