# backend/rpgvault/worlds/router.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth.models import CurrentUser
from ..auth.utils import require_editor
from ..deps import get_db
from ..game_systems.models import GameSystem
from ..game_systems.schemas import GameSystemSummary
from ..shared.db import utcnow
from . import schemas as s
from .models import World

router = APIRouter(prefix="/worlds", tags=["worlds"])


def _get_or_404(db: Session, world_id: str) -> World:
    world = db.get(World, world_id)
    if not world:
        raise HTTPException(404, f"World with ID {world_id} not found")
    return world


def _to_out(world: World, gs: GameSystem) -> s.WorldOut:
    return s.WorldOut(
        id=world.id,
        name=world.name,
        image_url=world.image_url,
        game_system=GameSystemSummary(id=gs.id, name=gs.name, default_image_url=gs.image_url),
        session_data=world.session_data or {},
        last_accessed_at=world.last_accessed_at,
        created_at=world.created_at,
    )


@router.get("", response_model=List[s.WorldOut])
def list_worlds(db: Session = Depends(get_db)):
    # 최근 접속 순, 시스템이 사라진 월드는 뺀다
    rows = db.execute(
        select(World, GameSystem)
        .join(GameSystem, GameSystem.id == World.game_system_id)
        .order_by(World.last_accessed_at.desc())
    ).all()
    return [_to_out(w, gs) for w, gs in rows]


@router.post("", response_model=s.WorldOut, status_code=201)
def create_world(
    payload: s.WorldCreate,
    db: Session = Depends(get_db),
    _: CurrentUser = Depends(require_editor),
):
    gs = db.get(GameSystem, payload.game_system_id)
    if not gs:
        raise HTTPException(400, f"Game system with ID {payload.game_system_id} not found")
    if not gs.is_active:
        raise HTTPException(400, f"Game system {gs.name} is not active")

    world = World(
        name=payload.name,
        image_url=str(payload.image_url) if payload.image_url else None,
        game_system_id=gs.id,
        session_data={},
    )
    db.add(world)
    db.commit()
    db.refresh(world)
    return _to_out(world, gs)


@router.get("/{world_id}", response_model=s.WorldOut)
def get_world(world_id: str, db: Session = Depends(get_db)):
    world = _get_or_404(db, world_id)
    gs = db.get(GameSystem, world.game_system_id)
    if not gs:
        raise HTTPException(404, f"Game system with ID {world.game_system_id} not found")
    return _to_out(world, gs)


@router.put("/{world_id}", response_model=s.WorldOut)
def update_world(
    world_id: str,
    payload: s.WorldUpdate,
    db: Session = Depends(get_db),
    _: CurrentUser = Depends(require_editor),
):
    world = _get_or_404(db, world_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("name") is not None:
        world.name = changes["name"]
    if "image_url" in changes:
        world.image_url = str(changes["image_url"]) if changes["image_url"] else None
    if changes.get("session_data") is not None:
        world.session_data = changes["session_data"]
    world.updated_at = utcnow()

    db.commit()
    db.refresh(world)
    return _to_out(world, db.get(GameSystem, world.game_system_id))


@router.delete("/{world_id}", status_code=204)
def delete_world(
    world_id: str,
    db: Session = Depends(get_db),
    _: CurrentUser = Depends(require_editor),
):
    world = _get_or_404(db, world_id)
    db.delete(world)
    db.commit()
    return Response(status_code=204)


@router.post("/{world_id}/launch", response_model=s.LaunchOut)
def launch_world(world_id: str, db: Session = Depends(get_db)):
    world = _get_or_404(db, world_id)
    now = utcnow()
    world.last_accessed_at = now
    world.updated_at = now
    db.commit()
    return s.LaunchOut(world_id=world.id, launch_url=f"/game/{world.id}", last_accessed_at=now)
