"""Хранение файлов договоров (фото/PDF) в каталоге uploads."""
import asyncio
import uuid
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, List, Optional

from fastapi import UploadFile

from pest_crm.config import settings
from pest_crm.core.errors import NotFoundError, UnsupportedMediaError, ValidationError
from pest_crm.core.logging_config import get_logger

logger = get_logger(__name__)

URL_PREFIX = "/uploads"
CHUNK_SIZE = 1024 * 1024

ALLOWED_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
}
ALLOWED_EXTENSIONS = set(ALLOWED_TYPES.values()) | {".jpeg"}


def uploads_dir() -> Path:
    path = Path(settings.uploads_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def file_url(filename: str) -> str:
    return f"{URL_PREFIX}/{filename}"


def _safe_name(ref: str) -> str:
    """Имя файла из имени или URL вида /uploads/<name>; без каталогов."""
    return Path(ref.replace("\\", "/").rsplit("/", 1)[-1]).name


def _store(source: BinaryIO, target: Path, limit: int) -> Optional[int]:
    """Копирует поток в target; None и без файла на диске, если превышен limit."""
    size = 0
    with target.open("wb") as out:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > limit:
                break
            out.write(chunk)
    if size > limit:
        target.unlink(missing_ok=True)
        return None
    return size


async def save_upload(file: Optional[UploadFile]) -> dict:
    if file is None or not file.filename:
        raise ValidationError("Файл не был загружен")
    mimetype = (file.content_type or "").lower()
    if mimetype not in ALLOWED_TYPES:
        raise UnsupportedMediaError("Недопустимый тип файла. Разрешены: JPG, PNG, GIF, WEBP, PDF")

    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        ext = ALLOWED_TYPES[mimetype]
    filename = f"{uuid.uuid4()}{ext}"
    target = uploads_dir() / filename
    # запись на диск вне цикла событий
    size = await asyncio.to_thread(_store, file.file, target, settings.max_upload_size)
    if size is None:
        limit_mb = settings.max_upload_size // (1024 * 1024)
        raise UnsupportedMediaError(f"Файл слишком большой. Максимум {limit_mb} МБ")

    logger.info("Файл сохранён: %s (%s байт)", filename, size)
    return {
        "filename": filename,
        "original_name": file.filename,
        "url": file_url(filename),
        "size": size,
        "mimetype": mimetype,
    }


def delete_file(name: str) -> None:
    path = uploads_dir() / _safe_name(name)
    if not path.is_file():
        raise NotFoundError("Файл не найден")
    path.unlink()
    logger.info("Файл удалён: %s", path.name)


def delete_file_quietly(ref: Optional[str]) -> bool:
    """Удаление файла без ошибок для вызывающего: сбой только логируется."""
    if not ref:
        return False
    name = _safe_name(ref)
    if not name:
        return False
    try:
        (Path(settings.uploads_dir) / name).unlink()
    except OSError as e:
        logger.warning("Не удалось удалить файл %s: %s", name, e)
        return False
    logger.info("Файл удалён: %s", name)
    return True


def list_files() -> List[dict]:
    out = []
    for path in sorted(uploads_dir().iterdir()):
        if path.name.startswith(".") or not path.is_file():
            continue
        stat = path.stat()
        out.append({
            "filename": path.name,
            "url": file_url(path.name),
            "size": stat.st_size,
            "created_at": datetime.fromtimestamp(stat.st_mtime),
        })
    return out
