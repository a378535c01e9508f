# backend/rpgvault/locks/store.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class EditLock:
    resource_id: str
    owner_user_id: str
    acquired_at: datetime
    expires_at: datetime


def is_live(lock: EditLock, now: datetime) -> bool:
    return now < lock.expires_at


def remaining(lock: EditLock, now: datetime) -> timedelta:
    return max(lock.expires_at - now, timedelta(0))


class LockStore:
    """resource_id -> EditLock. 프로세스 메모리에만 존재한다.

    LockManager 만 변경한다. 값이 불변이라 밖으로 그대로 넘겨도 안전하다.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, EditLock] = {}

    def get(self, resource_id: str) -> Optional[EditLock]:
        return self._locks.get(resource_id)

    def put(self, lock: EditLock) -> None:
        self._locks[lock.resource_id] = lock

    def pop(self, resource_id: str) -> Optional[EditLock]:
        return self._locks.pop(resource_id, None)

    def values(self) -> List[EditLock]:
        return list(self._locks.values())

    def items(self) -> List[Tuple[str, EditLock]]:
        return list(self._locks.items())

    def sweep(self, now: datetime) -> List[str]:
        """만료된 잠금을 지우고 지운 resource_id 목록을 돌려준다."""
        expired = [rid for rid, lock in self._locks.items() if not is_live(lock, now)]
        for rid in expired:
            del self._locks[rid]
        return expired

    def __len__(self) -> int:
        return len(self._locks)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._locks
