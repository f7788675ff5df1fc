# employee_server/uploads.py
import os
import time
import random
import logging
from typing import Optional

from fastapi import UploadFile

from employee_server.errors import UploadError

logger = logging.getLogger(__name__)

# Constants / config
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(BASE_DIR, "uploads"))
UPLOAD_URL_PREFIX = "uploads"
MAX_UPLOAD_SIZE = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png")
CHUNK_SIZE = 64 * 1024

if not os.path.exists(UPLOAD_DIR):
    os.makedirs(UPLOAD_DIR, exist_ok=True)


def has_file(file: Optional[UploadFile]) -> bool:
    # browsers send an empty part (no filename) when nothing was picked
    return file is not None and bool(file.filename)


def check_image_type(file: UploadFile) -> None:
    """Reject anything but JPEG/PNG before a single byte hits the disk."""
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise UploadError("Only JPEG or PNG images are allowed")


def make_filename(original: str) -> str:
    """<millisecond-timestamp>-<random 9-digit int>-<original filename>"""
    safe_name = os.path.basename(original.replace("\\", "/")) or "image"
    millis = int(time.time() * 1000)
    return f"{millis}-{random.randint(100_000_000, 999_999_999)}-{safe_name}"


def save_profile_image(file: Optional[UploadFile]) -> Optional[str]:
    """
    Validate and store the uploaded profile picture.

    Returns the relative path (uploads/<generated-name>) to keep on the
    employee row, or None when the request carried no file.
    """
    if not has_file(file):
        return None
    check_image_type(file)

    unique_filename = make_filename(file.filename)
    file_path_fs = os.path.join(UPLOAD_DIR, unique_filename)
    total = 0
    try:
        with open(file_path_fs, "wb") as buffer:
            while True:
                chunk = file.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > MAX_UPLOAD_SIZE:
                    break
                buffer.write(chunk)
    finally:
        try:
            file.file.seek(0)
        except Exception:
            logger.debug("Could not rewind upload %s", file.filename, exc_info=True)

    if total > MAX_UPLOAD_SIZE:
        _remove(file_path_fs)
        raise UploadError(f"File too large. Limit is {MAX_UPLOAD_SIZE // (1024 * 1024)} MB")

    logger.info("Stored profile image %s (%d bytes)", unique_filename, total)
    return f"{UPLOAD_URL_PREFIX}/{unique_filename}"


def delete_upload(relative_path: Optional[str]) -> None:
    """
    Delete a stored upload. Accepts the relative path returned by
    save_profile_image ('uploads/<name>'); missing files are ignored.
    """
    if not relative_path:
        return
    name = os.path.basename(relative_path)
    _remove(os.path.join(UPLOAD_DIR, name))


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not delete upload %s", path, exc_info=True)
