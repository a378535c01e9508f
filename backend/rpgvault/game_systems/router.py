# backend/rpgvault/game_systems/router.py
import logging
import math
from typing import Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from ..auth.models import CurrentUser
from ..auth.utils import current_user, require_editor
from ..deps import get_db, get_lock_manager, get_storage, get_validator
from ..documents.models import Document
from ..documents.storage import FileStorage
from ..locks.manager import LockManager
from ..locks.schemas import LockAcquireIn, LockOut
from ..shared.db import utcnow
from ..shared.schemas import Page, Pagination
from ..validation.service import SchemaValidator
from ..worlds.models import World
from . import schemas as s
from .guard import check_validation_schema, ensure_not_locked_by_other, get_system_or_404
from .models import GameSystem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/game-systems", tags=["game-systems"])


def _name_taken(db: Session, owner_id: str, name: str, exclude_id: Optional[str] = None) -> bool:
    q = select(GameSystem.id).where(
        GameSystem.owner_id == owner_id, func.lower(GameSystem.name) == name.strip().lower()
    )
    if exclude_id:
        q = q.where(GameSystem.id != exclude_id)
    return db.scalar(q) is not None


def _world_count(db: Session, gid: str) -> int:
    return db.scalar(select(func.count(World.id)).where(World.game_system_id == gid)) or 0


@router.get("", response_model=Page[s.GameSystemOut])
def list_game_systems(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    owner_id: Optional[str] = Query(None, alias="ownerId"),
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_db),
):
    q = select(GameSystem)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.where(or_(GameSystem.name.ilike(pattern), GameSystem.description.ilike(pattern)))
    if owner_id:
        q = q.where(GameSystem.owner_id == owner_id)
    if not include_inactive:
        q = q.where(GameSystem.is_active.is_(True))

    total = db.scalar(select(func.count()).select_from(q.subquery())) or 0
    rows = db.scalars(
        q.order_by(GameSystem.created_at.desc(), GameSystem.id).offset((page - 1) * limit).limit(limit)
    ).all()
    return Page[s.GameSystemOut](
        data=[s.GameSystemOut.model_validate(r) for r in rows],
        pagination=Pagination(
            page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)
        ),
    )


@router.post("", response_model=s.GameSystemOut, status_code=201)
def create_game_system(
    payload: s.GameSystemCreate,
    db: Session = Depends(get_db),
    validator: SchemaValidator = Depends(get_validator),
    user: CurrentUser = Depends(require_editor),
):
    if _name_taken(db, user.id, payload.name):
        raise HTTPException(409, "A game system with this name already exists")
    if payload.parent_system_id and not db.get(GameSystem, payload.parent_system_id):
        raise HTTPException(404, "Parent system not found")
    check_validation_schema(validator, payload.validation_schema)

    gs = GameSystem(
        name=payload.name.strip(),
        description=payload.description.strip() if payload.description else None,
        image_url=str(payload.image_url) if payload.image_url else None,
        owner_id=user.id,
        parent_system_id=payload.parent_system_id,
        validation_schema=payload.validation_schema,
        sync_with_parent=payload.sync_with_parent,
        is_public=True,
    )
    db.add(gs)
    db.commit()
    db.refresh(gs)
    logger.info("game system %s created by %s", gs.id, user.id)
    return gs


@router.get("/usage-stats", response_model=Dict[str, int])
def usage_stats(db: Session = Depends(get_db)):
    rows = db.execute(
        select(GameSystem.id, func.count(World.id))
        .outerjoin(World, World.game_system_id == GameSystem.id)
        .group_by(GameSystem.id)
    ).all()
    return {gid: cnt for gid, cnt in rows}


@router.get("/{gid}", response_model=s.GameSystemDetailOut)
def get_game_system(
    gid: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
):
    gs = get_system_or_404(db, gid)
    out = s.GameSystemDetailOut.model_validate(gs)
    lock = locks.get(gid)
    if lock:
        out.lock = LockOut.from_lock(lock, locks.clock())
    return out


@router.put("/{gid}", response_model=s.GameSystemOut)
def update_game_system(
    gid: str,
    payload: s.GameSystemUpdate,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    validator: SchemaValidator = Depends(get_validator),
    user: CurrentUser = Depends(require_editor),
):
    gs = get_system_or_404(db, gid)
    ensure_not_locked_by_other(locks, gid, user)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("name") and changes["name"].strip().lower() != gs.name.lower():
        if _name_taken(db, user.id, changes["name"], exclude_id=gid):
            raise HTTPException(409, "A game system with this name already exists")
    if "validation_schema" in changes:
        check_validation_schema(validator, changes["validation_schema"])

    for field, value in changes.items():
        if field in ("name", "sync_with_parent") and value is None:
            continue  # NOT NULL 컬럼
        if field == "image_url" and value is not None:
            value = str(value)
        elif field in ("name", "description") and isinstance(value, str):
            value = value.strip()
        setattr(gs, field, value)
    gs.updated_at = utcnow()

    db.commit()
    db.refresh(gs)
    return gs


@router.patch("/{gid}/activate", response_model=s.GameSystemOut)
def activate(
    gid: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(require_editor),
):
    gs = get_system_or_404(db, gid)
    ensure_not_locked_by_other(locks, gid, user)
    gs.is_active = True
    gs.updated_at = utcnow()
    db.commit()
    db.refresh(gs)
    return gs


@router.patch("/{gid}/deactivate", response_model=s.GameSystemOut)
def deactivate(
    gid: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(require_editor),
):
    gs = get_system_or_404(db, gid)
    ensure_not_locked_by_other(locks, gid, user)
    in_use = _world_count(db, gid)
    if in_use:
        raise HTTPException(400, f"Cannot deactivate game system: used by {in_use} world(s)")
    gs.is_active = False
    gs.updated_at = utcnow()
    db.commit()
    db.refresh(gs)
    return gs


@router.delete("/{gid}", status_code=204)
def delete_game_system(
    gid: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    storage: FileStorage = Depends(get_storage),
    user: CurrentUser = Depends(require_editor),
):
    get_system_or_404(db, gid)
    if db.scalar(select(GameSystem.id).where(GameSystem.parent_system_id == gid)):
        raise HTTPException(409, "Cannot delete game system with derived systems")
    if _world_count(db, gid):
        raise HTTPException(409, "Cannot delete game system used by worlds")
    ensure_not_locked_by_other(locks, gid, user)

    paths = db.scalars(select(Document.file_path).where(Document.game_system_id == gid)).all()
    db.execute(delete(Document).where(Document.game_system_id == gid))
    db.execute(delete(GameSystem).where(GameSystem.id == gid))
    db.commit()

    for p in paths:
        storage.delete(p)
    locks.force_release(gid)
    logger.info("game system %s deleted by %s", gid, user.id)
    return Response(status_code=204)


# ------------------------
# 편집 잠금
# ------------------------
@router.get("/{gid}/lock", response_model=Optional[LockOut])
def get_lock(
    gid: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
):
    get_system_or_404(db, gid)
    lock = locks.get(gid)
    return LockOut.from_lock(lock, locks.clock()) if lock else None


@router.post("/{gid}/lock", response_model=LockOut)
def acquire_lock(
    gid: str,
    payload: Optional[LockAcquireIn] = Body(None),
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(require_editor),
):
    get_system_or_404(db, gid)
    lock = locks.acquire(gid, user.id, payload.duration_minutes if payload else None)
    return LockOut.from_lock(lock, locks.clock())


@router.put("/{gid}/lock", response_model=LockOut)
def renew_lock(
    gid: str,
    payload: Optional[LockAcquireIn] = Body(None),
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(require_editor),
):
    get_system_or_404(db, gid)
    lock = locks.renew(gid, user.id, payload.duration_minutes if payload else None)
    return LockOut.from_lock(lock, locks.clock())


@router.delete("/{gid}/lock", status_code=204)
def release_lock(
    gid: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(current_user),
):
    get_system_or_404(db, gid)
    locks.release(gid, user.id)
    return Response(status_code=204)
