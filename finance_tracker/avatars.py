"""
Avatar uploads

Uploads are validated, shrunk when large, then stored. Storage is attempted in
order:
1. the avatar directory (object storage), one file per user
2. a base64 data URL kept on the user row, when the directory is unusable
"""

import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from finance_tracker.config import AVATAR_COMPRESS_BYTES, AVATAR_DIR, AVATAR_MAX_BYTES
from finance_tracker.db import UserModel

logger = logging.getLogger(__name__)

VALID_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]
FALLBACK_PREFIX = "fallback_"

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
_MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


class AvatarError(ValueError):
    """Upload rejected before anything was stored."""


def validate_upload(content_type: Optional[str], data: bytes, max_bytes: int = AVATAR_MAX_BYTES) -> None:
    if not data:
        raise AvatarError("Please select a file to upload")
    if content_type not in VALID_TYPES:
        raise AvatarError("Please upload a valid image file (JPEG, PNG, GIF, or WebP)")
    if len(data) > max_bytes:
        raise AvatarError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")


def avatar_filename(user_id: int, upload_name: Optional[str], content_type: str) -> str:
    ext = upload_name.rsplit(".", 1)[-1].lower() if upload_name and "." in upload_name else ""
    if ext not in _MEDIA_TYPES:
        ext = _EXTENSIONS[content_type]
    return f"{user_id}.{ext}"


def media_type_for(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower()
    return _MEDIA_TYPES.get(ext, "application/octet-stream")


def compress_image(data: bytes, max_size: int = 400, quality: int = 80) -> bytes:
    """Scale the longest side down to ``max_size`` pixels, keeping the format.

    Returns the original bytes when Pillow cannot read the image or the result
    is not smaller.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format
            img.thumbnail((max_size, max_size))
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out = BytesIO()
            img.save(out, format=fmt, quality=quality, optimize=True)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.warning("Avatar compression failed, keeping original: %s", e)
        return data

    compressed = out.getvalue()
    return compressed if len(compressed) < len(data) else data


def to_data_url(content_type: str, data: bytes) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_url(data_url: str) -> Tuple[str, bytes]:
    try:
        header, encoded = data_url.split(",", 1)
        content_type = header[len("data:"):].split(";", 1)[0]
        return content_type, base64.b64decode(encoded)
    except (ValueError, binascii.Error) as e:
        raise AvatarError("Stored avatar is not a valid data URL") from e


class AvatarStorage:
    """Avatar files kept in a single directory, named after their owner."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def save(self, filename: str, data: bytes) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_bytes(data)
        return path

    def load(self, filename: str) -> Optional[bytes]:
        path = self.directory / filename
        if not path.is_file():
            return None
        return path.read_bytes()

    def remove(self, filename: str) -> None:
        (self.directory / filename).unlink(missing_ok=True)


def get_avatar_storage() -> AvatarStorage:
    return AvatarStorage(Path(AVATAR_DIR))


def store_avatar(
    user: UserModel,
    data: bytes,
    content_type: str,
    upload_name: Optional[str],
    storage: AvatarStorage,
) -> str:
    """Validate, compress and store an avatar on ``user``; returns a status message.

    The caller commits the user row.
    """
    validate_upload(content_type, data)
    if len(data) > AVATAR_COMPRESS_BYTES:
        data = compress_image(data)

    filename = avatar_filename(user.id, upload_name, content_type)

    try:
        old = user.avatar
        if old and not old.startswith(FALLBACK_PREFIX) and old != filename:
            storage.remove(old)
        storage.save(filename, data)
    except OSError as e:
        logger.warning("Avatar storage unavailable for user %s, storing inline: %s", user.id, e)
        user.avatar = f"{FALLBACK_PREFIX}{filename}"
        user.avatar_base64 = to_data_url(content_type, data)
        return "Avatar uploaded successfully! (stored inline, avatar storage is unavailable)"

    user.avatar = filename
    user.avatar_base64 = None
    logger.info("Stored avatar %s for user %s", filename, user.id)
    return "Avatar uploaded successfully!"


def load_avatar(user: UserModel, storage: AvatarStorage) -> Optional[Tuple[str, bytes]]:
    """(media type, bytes) of the user's avatar, or None when there is none."""
    if user.avatar_base64:
        return from_data_url(user.avatar_base64)
    if not user.avatar:
        return None
    data = storage.load(user.avatar)
    if data is None:
        return None
    return media_type_for(user.avatar), data
