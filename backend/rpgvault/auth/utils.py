# backend/rpgvault/auth/utils.py
from __future__ import annotations
import datetime as dt
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..shared.config import Settings
from .models import CurrentUser, UserRole

bearer = HTTPBearer(auto_error=False)


def create_token(
    user_id: str, role: UserRole = UserRole.editor, *, settings: Settings, ttl_min: Optional[int] = None
) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    ttl = ttl_min if ttl_min is not None else settings.ACCESS_TTL_MIN
    payload = {
        "sub": str(user_id),
        "role": UserRole(role).value,
        "iat": now,
        "exp": now + dt.timedelta(minutes=ttl),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_token(token: str, settings: Settings) -> CurrentUser:
    try:
        data = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise HTTPException(401, "Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(401, "Invalid token")

    sub = data.get("sub")
    if not sub:
        raise HTTPException(401, "Invalid token")
    try:
        role = UserRole(data.get("role", UserRole.viewer.value))
    except ValueError:
        raise HTTPException(401, "Invalid token")
    return CurrentUser(id=str(sub), role=role)


def current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> CurrentUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(401, "Not authenticated")
    return decode_token(credentials.credentials, request.app.state.settings)


def require_roles(*roles: UserRole):
    def _dep(user: CurrentUser = Depends(current_user)) -> CurrentUser:
        if roles and user.role not in roles:
            raise HTTPException(403, "Forbidden")
        return user

    return _dep


require_editor = require_roles(UserRole.admin, UserRole.editor)
require_admin = require_roles(UserRole.admin)
