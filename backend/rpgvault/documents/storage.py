# backend/rpgvault/documents/storage.py
from __future__ import annotations
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Union

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class FileStorage:
    """문서 파일 저장소. DB 에는 <game_system_id>/<uuid><ext> 상대경로만 남긴다."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _resolve(self, relative_path: str) -> Path:
        full = (self.base_dir / relative_path).resolve()
        # 저장소 밖으로 나가는 경로 차단 (../ 등)
        if full != self.base_dir and self.base_dir not in full.parents:
            raise StorageError(f"Invalid file path: {relative_path}")
        return full

    def store(self, content: bytes, original_filename: str, game_system_id: str) -> str:
        ext = PurePosixPath(original_filename).suffix.lower()
        relative = f"{game_system_id}/{uuid.uuid4()}{ext}"
        target = self._resolve(relative)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.exception("failed to store %s", relative)
            raise StorageError("Failed to store file") from e
        return relative

    def read(self, relative_path: str) -> bytes:
        target = self._resolve(relative_path)
        try:
            return target.read_bytes()
        except OSError as e:
            logger.exception("failed to read %s", relative_path)
            raise StorageError("Failed to read file") from e

    def delete(self, relative_path: str) -> bool:
        """실패해도 예외 없이 False (로그만 남긴다)."""
        try:
            self._resolve(relative_path).unlink()
        except (OSError, StorageError):
            logger.exception("failed to delete %s", relative_path)
            return False
        return True

    def exists(self, relative_path: str) -> bool:
        try:
            return self._resolve(relative_path).is_file()
        except StorageError:
            return False
