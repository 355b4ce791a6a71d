"""
Upload staging: validates the incoming file and writes it under UPLOAD_DIR,
from where main.py serves it at /uploads.
"""

import time
import uuid
from pathlib import Path

from fastapi import UploadFile

from config import settings
from exceptions import ValidationError
from logging_config import logger

CHUNK_SIZE = 1024 * 1024

CONTENT_TYPES = {
    "pdf": {"application/pdf"},
    "jpg": {"image/jpeg"},
    "jpeg": {"image/jpeg"},
    "png": {"image/png"},
    "doc": {"application/msword"},
    "docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
}


def extension_of(filename: str) -> str:
    return Path(filename or "").suffix.lower().lstrip(".")


def validate_upload(file: UploadFile) -> None:
    """Both the extension and the declared content type must be allowed and agree"""
    ext = extension_of(file.filename)
    if ext not in settings.ALLOWED_EXTENSIONS or ext not in CONTENT_TYPES:
        raise ValidationError("Images and Docs Only!", field="file")
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in CONTENT_TYPES[ext]:
        raise ValidationError("Images and Docs Only!", field="file")


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def stored_name(original: str) -> str:
    """Unique on-disk name, e.g. file-1700000000123-9f1c2a4b.pdf"""
    return f"file-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{extension_of(original)}"


def save_upload(file: UploadFile) -> str:
    """Persist an already validated file, returning the stored filename"""
    filename = stored_name(file.filename)
    target = upload_dir() / filename

    written = 0
    try:
        with open(target, "xb") as out:
            while True:
                chunk = file.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > settings.MAX_UPLOAD_SIZE:
                    raise ValidationError("File too large", field="file")
                out.write(chunk)
    except FileExistsError:
        # Another upload claimed the name; nothing was written
        return save_upload(file)
    except Exception:
        target.unlink(missing_ok=True)
        raise

    logger.info(f"[Upload] Stored {file.filename} as {filename} ({written} bytes)")
    return filename


def remove_upload(filename: str) -> None:
    """Delete a stored file whose resource was never created"""
    (upload_dir() / filename).unlink(missing_ok=True)
    logger.warning(f"[Upload] Removed orphaned file {filename}")
