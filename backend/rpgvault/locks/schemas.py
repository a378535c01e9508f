# backend/rpgvault/locks/schemas.py
from datetime import datetime
from typing import Dict, Optional

from pydantic import Field

from ..shared.schemas import ApiModel
from .manager import LockStatistics
from .store import EditLock, remaining


class LockAcquireIn(ApiModel):
    duration_minutes: Optional[float] = Field(default=None, gt=0, le=24 * 60)


class LockOut(ApiModel):
    game_system_id: str
    locked_by: str
    acquired_at: datetime
    expires_at: datetime
    remaining_sec: int

    @classmethod
    def from_lock(cls, lock: EditLock, now: datetime) -> "LockOut":
        return cls(
            game_system_id=lock.resource_id,
            locked_by=lock.owner_user_id,
            acquired_at=lock.acquired_at,
            expires_at=lock.expires_at,
            remaining_sec=int(remaining(lock, now).total_seconds()),
        )


class LockStatsOut(ApiModel):
    total_locks: int
    live_locks: int
    expired_locks: int
    locks_by_user: Dict[str, int]

    @classmethod
    def from_stats(cls, stats: LockStatistics) -> "LockStatsOut":
        return cls(
            total_locks=stats.total_locks,
            live_locks=stats.live_locks,
            expired_locks=stats.expired_locks,
            locks_by_user=stats.locks_by_user,
        )


class SweepOut(ApiModel):
    removed: int
