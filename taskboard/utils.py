import re
import secrets
from datetime import datetime, timezone

OBJECT_ID_PATTERN = r"^[0-9a-fA-F]{24}$"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def new_object_id() -> str:
    return secrets.token_hex(12)


def utcnow() -> datetime:
    # Naive UTC: SQLite drops tzinfo on the way back out.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_error_message(message: str) -> str:
    message = message.replace('"', "")
    message = re.sub(r"\\+", "", message)
    message = message.replace(";", ",")
    return message[:1].upper() + message[1:]


def get_asset_url(base_url: str, path: str | None) -> str | None:
    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path

    clean_path = path if path.startswith("/") else f"/{path}"
    return f"{base_url.rstrip('/')}{clean_path}"
