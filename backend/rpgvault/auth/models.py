# backend/rpgvault/auth/models.py
# 사용자 저장소는 외부(IdP). 여기서는 토큰에서 꺼낸 신원만 다룬다.
from __future__ import annotations
import enum
from dataclasses import dataclass


class UserRole(str, enum.Enum):
    admin = "admin"
    editor = "editor"
    viewer = "viewer"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: UserRole = UserRole.editor
