# backend/rpgvault/locks/manager.py
from __future__ import annotations
import logging
import threading
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .errors import LockConflict, LockForbidden
from .store import EditLock, LockStore, is_live

logger = logging.getLogger(__name__)

DEFAULT_LOCK_MINUTES = 30

Clock = Callable[[], datetime]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LockStatistics:
    total_locks: int
    live_locks: int
    expired_locks: int
    locks_by_user: Dict[str, int]


class LockManager:
    """게임 시스템 편집 잠금. 한 리소스에 살아있는 잠금은 최대 1개.

    모든 연산은 하나의 RLock 안에서 실행된다 (acquire/renew 의 check-then-set 보호).
    force_release 는 권한 검사를 하지 않는다. 호출하는 쪽(HTTP 레이어)이 관리자 여부를 확인해야 함.
    """

    def __init__(
        self,
        store: Optional[LockStore] = None,
        clock: Clock = _now,
        default_duration_minutes: int = DEFAULT_LOCK_MINUTES,
    ):
        if default_duration_minutes <= 0:
            raise ValueError("default_duration_minutes must be positive")
        self.store = store if store is not None else LockStore()
        self.clock = clock
        self.default_duration = timedelta(minutes=default_duration_minutes)
        self._mutex = threading.RLock()

    def _duration(self, duration_minutes: Optional[float]) -> timedelta:
        if duration_minutes is None:
            return self.default_duration
        if duration_minutes <= 0:
            raise ValueError("duration_minutes must be positive")
        return timedelta(minutes=duration_minutes)

    def acquire(
        self, resource_id: str, user_id: str, duration_minutes: Optional[float] = None
    ) -> EditLock:
        duration = self._duration(duration_minutes)
        with self._mutex:
            now = self.clock()
            self.store.sweep(now)

            cur = self.store.get(resource_id)
            if cur and is_live(cur, now) and cur.owner_user_id != user_id:
                logger.info(
                    "lock conflict on %s: held by %s, requested by %s",
                    resource_id,
                    cur.owner_user_id,
                    user_id,
                )
                raise LockConflict(
                    f"Game system is already locked by another user until {cur.expires_at.isoformat()}",
                    resource_id,
                    current=cur,
                )

            # 같은 사용자의 재획득도 새 잠금으로 덮어쓴다
            lock = EditLock(
                resource_id=resource_id,
                owner_user_id=user_id,
                acquired_at=now,
                expires_at=now + duration,
            )
            self.store.put(lock)
            logger.info("lock acquired on %s by %s until %s", resource_id, user_id, lock.expires_at)
            return lock

    def release(self, resource_id: str, user_id: str) -> None:
        with self._mutex:
            cur = self.store.get(resource_id)
            if cur is None:
                return
            if not is_live(cur, self.clock()):
                self.store.pop(resource_id)
                return
            if cur.owner_user_id != user_id:
                raise LockForbidden("You are not authorized to release this lock", resource_id)
            self.store.pop(resource_id)
            logger.info("lock released on %s by %s", resource_id, user_id)

    def renew(
        self, resource_id: str, user_id: str, duration_minutes: Optional[float] = None
    ) -> EditLock:
        duration = self._duration(duration_minutes)
        with self._mutex:
            # 만료됐더라도 아직 정리 전이면 원래 소유자가 연장할 수 있다
            cur = self.store.get(resource_id)
            if cur is None:
                raise LockConflict("No lock exists for this game system", resource_id)
            if cur.owner_user_id != user_id:
                raise LockForbidden("You are not authorized to renew this lock", resource_id)

            lock = replace(cur, expires_at=self.clock() + duration)
            self.store.put(lock)
            logger.info("lock renewed on %s by %s until %s", resource_id, user_id, lock.expires_at)
            return lock

    def get(self, resource_id: str) -> Optional[EditLock]:
        with self._mutex:
            now = self.clock()
            self.store.sweep(now)
            lock = self.store.get(resource_id)
            if lock is None or not is_live(lock, now):
                return None
            return lock

    def is_locked(self, resource_id: str) -> bool:
        return self.get(resource_id) is not None

    def is_locked_by_user(self, resource_id: str, user_id: str) -> bool:
        lock = self.get(resource_id)
        return lock is not None and lock.owner_user_id == user_id

    def list_all(self) -> List[EditLock]:
        with self._mutex:
            self.store.sweep(self.clock())
            return self.store.values()

    def list_for_user(self, user_id: str) -> List[EditLock]:
        return [lock for lock in self.list_all() if lock.owner_user_id == user_id]

    def force_release(self, resource_id: str) -> None:
        with self._mutex:
            removed = self.store.pop(resource_id)
        if removed:
            logger.info("lock on %s force-released (owner %s)", resource_id, removed.owner_user_id)

    def release_all_for_user(self, user_id: str) -> None:
        with self._mutex:
            mine = [rid for rid, lock in self.store.items() if lock.owner_user_id == user_id]
            for rid in mine:
                self.store.pop(rid)
        logger.info("released %d lock(s) held by %s", len(mine), user_id)

    def sweep_expired(self) -> int:
        with self._mutex:
            removed = self.store.sweep(self.clock())
        if removed:
            logger.debug("swept %d expired lock(s): %s", len(removed), ", ".join(removed))
        return len(removed)

    def perform_scheduled_sweep(self) -> int:
        removed = self.sweep_expired()
        logger.info("Lock cleanup completed. removed=%d active=%d", removed, len(self.store))
        return removed

    def statistics(self) -> LockStatistics:
        # 정리하지 않고 현재 상태 그대로 (정리 지연 관찰용)
        with self._mutex:
            now = self.clock()
            locks = self.store.values()
        live = sum(1 for lock in locks if is_live(lock, now))
        return LockStatistics(
            total_locks=len(locks),
            live_locks=live,
            expired_locks=len(locks) - live,
            locks_by_user=dict(Counter(lock.owner_user_id for lock in locks)),
        )
