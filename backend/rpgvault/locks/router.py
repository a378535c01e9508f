# backend/rpgvault/locks/router.py
# 잠금 조회 + 관리자 전용 조작. 게임 시스템 단위 획득/해제는 game_systems/router.py
from typing import List

from fastapi import APIRouter, Depends, Response

from ..auth.models import CurrentUser
from ..auth.utils import current_user, require_admin
from ..deps import get_lock_manager
from .manager import LockManager
from .schemas import LockOut, LockStatsOut, SweepOut

router = APIRouter(prefix="/locks", tags=["locks"])


@router.get("", response_model=List[LockOut])
def list_locks(
    locks: LockManager = Depends(get_lock_manager),
    _: CurrentUser = Depends(current_user),
):
    now = locks.clock()
    return [LockOut.from_lock(lock, now) for lock in locks.list_all()]


@router.get("/mine", response_model=List[LockOut])
def my_locks(
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(current_user),
):
    now = locks.clock()
    return [LockOut.from_lock(lock, now) for lock in locks.list_for_user(user.id)]


@router.get("/stats", response_model=LockStatsOut)
def lock_stats(locks: LockManager = Depends(get_lock_manager), _=Depends(require_admin)):
    return LockStatsOut.from_stats(locks.statistics())


@router.post("/sweep", response_model=SweepOut)
def sweep(locks: LockManager = Depends(get_lock_manager), _=Depends(require_admin)):
    return SweepOut(removed=locks.sweep_expired())


@router.post("/{resource_id}/force-release", status_code=204)
def force_release(
    resource_id: str,
    locks: LockManager = Depends(get_lock_manager),
    _=Depends(require_admin),
):
    locks.force_release(resource_id)
    return Response(status_code=204)


@router.delete("/users/{user_id}", status_code=204)
def release_user_locks(
    user_id: str,
    locks: LockManager = Depends(get_lock_manager),
    _=Depends(require_admin),
):
    locks.release_all_for_user(user_id)
    return Response(status_code=204)
