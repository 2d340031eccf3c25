"""Inline image uploads.

Clients may send an image field as a ``data:<mime>;base64,<payload>`` string.
It is written under the upload directory and the field is replaced with the
``/uploads/...`` path the static mount serves it from.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from taskboard.errors import ValidationError

logger = logging.getLogger(__name__)

DATA_URI_RE = re.compile(r"^data:(?P<mimetype>[^;,]+);base64,(?P<payload>.+)$", re.DOTALL)

UPLOAD_ROUTE = "/uploads"

# Raster images only; SVG can carry script.
IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpeg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class DecodedFile:
    fieldname: str
    mimetype: str
    content: bytes

    @property
    def extension(self) -> str:
        return IMAGE_EXTENSIONS[self.mimetype]


def is_data_uri(value: object) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def decode_data_uri(value: str, fieldname: str) -> DecodedFile:
    match = DATA_URI_RE.match(value)
    if not match:
        raise ValidationError(f"{fieldname} is not a valid base64 data URI")
    mimetype = match.group("mimetype").strip().lower()
    if mimetype not in IMAGE_EXTENSIONS:
        raise ValidationError(f"{fieldname} must be a PNG, JPEG, GIF or WebP image")
    try:
        content = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError(f"{fieldname} is not valid base64") from exc
    return DecodedFile(fieldname=fieldname, mimetype=mimetype, content=content)


def save_upload(upload_dir: Path, folder: str, file: DecodedFile) -> str:
    target_dir = upload_dir / folder
    target_dir.mkdir(parents=True, exist_ok=True)

    unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    filename = f"{file.fieldname}-{unique_suffix}{file.extension}"
    (target_dir / filename).write_bytes(file.content)

    logger.info("Stored %s upload (%d bytes) as %s/%s", file.mimetype, len(file.content), folder, filename)
    return f"{UPLOAD_ROUTE}/{folder}/{filename}"


def store_inline_files(payload: dict, fields: tuple[str, ...], upload_dir: Path, folder: str = "others") -> dict:
    """Replace data URIs in ``fields`` with stored upload paths; other values pass through."""
    out = dict(payload)
    for field in fields:
        value = out.get(field)
        if is_data_uri(value):
            out[field] = save_upload(upload_dir, folder, decode_data_uri(value, field))
    return out
