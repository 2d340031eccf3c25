from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(
    message: str,
    data: Any = None,
    *,
    status_code: int = 200,
    ok: bool = True,
    pagination: dict[str, int] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "status": ok,
        "response_code": status_code,
        "message": message,
    }
    if pagination is not None:
        body["pagination"] = pagination
    body["data"] = data

    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
