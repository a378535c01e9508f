# backend/rpgvault/deps.py
from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from .documents.storage import FileStorage
from .locks.manager import LockManager
from .shared.db import SessionLocal
from .validation.service import SchemaValidator


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_lock_manager(request: Request) -> LockManager:
    return request.app.state.lock_manager


def get_validator(request: Request) -> SchemaValidator:
    return request.app.state.schema_validator


def get_storage(request: Request) -> FileStorage:
    return request.app.state.file_storage
