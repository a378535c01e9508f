# backend/rpgvault/locks/errors.py
from __future__ import annotations
from typing import Optional

from .store import EditLock


class LockError(Exception):
    def __init__(self, message: str, resource_id: str):
        super().__init__(message)
        self.message = message
        self.resource_id = resource_id


class LockConflict(LockError):
    """다른 사용자가 잡고 있거나, renew 대상 잠금이 아예 없음."""

    def __init__(self, message: str, resource_id: str, current: Optional[EditLock] = None):
        super().__init__(message, resource_id)
        self.current = current

    @property
    def expires_at(self):
        return self.current.expires_at if self.current else None


class LockForbidden(LockError):
    """소유자가 아닌 사용자의 release/renew."""
