# backend/rpgvault/documents/router.py
import hashlib
import json
import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.models import CurrentUser
from ..auth.utils import require_editor
from ..deps import get_db, get_lock_manager, get_storage, get_validator
from ..game_systems.guard import ensure_not_locked_by_other, get_system_or_404
from ..game_systems.models import GameSystem
from ..game_systems.schemas import GameSystemSummary
from ..locks.manager import LockManager
from ..shared.db import utcnow
from ..validation.service import SchemaValidator
from . import schemas as s
from .models import EXTENSION_TYPES, Document, DocumentType
from .storage import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])


def _get_active_or_404(db: Session, doc_id: str) -> Document:
    doc = db.get(Document, doc_id)
    if not doc or not doc.is_active:
        raise HTTPException(404, "Document not found")
    return doc


def _display_name_taken(
    db: Session, gid: str, display_name: str, exclude_id: Optional[str] = None
) -> bool:
    q = select(Document.id).where(
        Document.game_system_id == gid,
        Document.display_name == display_name,
        Document.is_active.is_(True),
    )
    if exclude_id:
        q = q.where(Document.id != exclude_id)
    return db.scalar(q) is not None


@router.get("/game-systems/{gid}/documents", response_model=List[s.DocumentOut])
def list_documents(
    gid: str,
    type: Optional[DocumentType] = None,
    tags: Optional[str] = Query(None, description="쉼표 구분, 하나라도 일치"),
    db: Session = Depends(get_db),
):
    get_system_or_404(db, gid)
    q = select(Document).where(Document.game_system_id == gid, Document.is_active.is_(True))
    if type:
        q = q.where(Document.type == type)
    docs = db.scalars(q.order_by(Document.created_at)).all()

    wanted = set(s.parse_tags(tags))
    if wanted:
        # JSON 컬럼이라 필터는 파이썬에서
        docs = [d for d in docs if wanted.intersection(d.tags or [])]
    return docs


@router.post("/game-systems/{gid}/documents", response_model=s.DocumentOut, status_code=201)
def upload_document(
    gid: str,
    file: UploadFile = File(...),
    display_name: str = Form(..., alias="displayName", min_length=1, max_length=100),
    tags: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    validator: SchemaValidator = Depends(get_validator),
    storage: FileStorage = Depends(get_storage),
    user: CurrentUser = Depends(require_editor),
):
    gs = get_system_or_404(db, gid)
    ensure_not_locked_by_other(locks, gid, user)

    if _display_name_taken(db, gid, display_name):
        raise HTTPException(409, "A document with this name already exists in the system")

    filename = file.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in EXTENSION_TYPES:
        raise HTTPException(
            422, "Unsupported file type. Only JSON, PDF, and Markdown files are allowed."
        )
    doc_type, mime_type = EXTENSION_TYPES[ext]

    content = file.file.read()

    validation_errors: List[str] = []
    if doc_type == DocumentType.JSON:
        try:
            parsed = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise HTTPException(422, "Invalid JSON format")
        if gs.validation_schema:
            validation_errors = validator.validate(parsed, gs.validation_schema)

    file_path = storage.store(content, filename, gid)

    doc = Document(
        game_system_id=gid,
        filename=filename,
        display_name=display_name,
        type=doc_type,
        file_path=file_path,
        file_size=len(content),
        mime_type=mime_type,
        uploaded_by=user.id,
        checksum=hashlib.sha256(content).hexdigest(),
        validation_errors=validation_errors,
        tags=s.parse_tags(tags),
        version=1,
        is_active=True,
    )
    db.add(doc)
    try:
        db.commit()
    except SQLAlchemyError:
        # 저장된 파일이 고아로 남지 않게
        db.rollback()
        storage.delete(file_path)
        raise
    db.refresh(doc)
    logger.info(
        "document %s uploaded to %s by %s (%d violation(s))",
        doc.id,
        gid,
        user.id,
        len(validation_errors),
    )
    return doc


@router.get("/documents/{doc_id}", response_model=s.DocumentDetailOut)
def get_document(doc_id: str, db: Session = Depends(get_db)):
    doc = _get_active_or_404(db, doc_id)
    out = s.DocumentDetailOut.model_validate(doc)
    gs = db.get(GameSystem, doc.game_system_id)
    if gs:
        out.game_system = GameSystemSummary(
            id=gs.id, name=gs.name, default_image_url=gs.image_url
        )
    return out


@router.put("/documents/{doc_id}", response_model=s.DocumentOut)
def update_document(
    doc_id: str,
    payload: s.DocumentUpdate,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    user: CurrentUser = Depends(require_editor),
):
    doc = _get_active_or_404(db, doc_id)
    ensure_not_locked_by_other(locks, doc.game_system_id, user)

    if payload.display_name and payload.display_name != doc.display_name:
        if _display_name_taken(db, doc.game_system_id, payload.display_name, exclude_id=doc_id):
            raise HTTPException(409, "A document with this name already exists in the system")
        doc.display_name = payload.display_name
    if payload.tags is not None:
        doc.tags = [t.strip() for t in payload.tags if t.strip()]
    doc.updated_at = utcnow()

    db.commit()
    db.refresh(doc)
    return doc


@router.delete("/documents/{doc_id}", status_code=204)
def delete_document(
    doc_id: str,
    db: Session = Depends(get_db),
    locks: LockManager = Depends(get_lock_manager),
    storage: FileStorage = Depends(get_storage),
    user: CurrentUser = Depends(require_editor),
):
    doc = _get_active_or_404(db, doc_id)
    ensure_not_locked_by_other(locks, doc.game_system_id, user)

    # soft delete, 파일은 지운다
    doc.is_active = False
    doc.updated_at = utcnow()
    db.commit()
    storage.delete(doc.file_path)
    return Response(status_code=204)


@router.get("/documents/{doc_id}/download")
def download_document(
    doc_id: str,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    doc = _get_active_or_404(db, doc_id)
    content = storage.read(doc.file_path)
    return Response(
        content=content,
        media_type=doc.mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(doc.filename)}"},
    )
