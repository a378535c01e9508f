# backend/rpgvault/game_systems/guard.py
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..auth.models import CurrentUser
from ..locks.manager import LockManager
from ..validation.service import SchemaValidator
from .models import GameSystem


def get_system_or_404(db: Session, gid: str) -> GameSystem:
    gs = db.get(GameSystem, gid)
    if not gs:
        raise HTTPException(404, "Game system not found")
    return gs


def ensure_not_locked_by_other(locks: LockManager, gid: str, user: CurrentUser) -> None:
    """잠금이 없거나 내 잠금이면 통과. 남의 잠금이면 409."""
    lock = locks.get(gid)
    if lock and lock.owner_user_id != user.id:
        raise HTTPException(
            status_code=409,
            detail=f"Game system is currently locked by another user until {lock.expires_at.isoformat()}",
        )


def check_validation_schema(validator: SchemaValidator, schema: Optional[Any]) -> None:
    if schema is None:
        return
    errors = validator.validate_ruleset_schema(schema)
    if not errors:
        compiled = validator.compile(schema)
        if not compiled.ok:
            errors = [f"Schema validation error: {compiled.error}"]
    if errors:
        raise HTTPException(
            status_code=422,
            detail={"message": "Invalid validation schema", "details": errors},
        )
