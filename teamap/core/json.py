# teamap/core/json.py
from datetime import datetime, timezone
from typing import Any
import json
from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse


class UTF8JSONResponse(JSONResponse):
    """
    Respuesta JSON garantizada en UTF-8, sin escapes ASCII y con
    jsonable_encoder previo (convierte datetime, etc.).
    """
    media_type = "application/json; charset=utf-8"

    def render(self, content: Any) -> bytes:
        payload = jsonable_encoder(content, exclude_none=False)
        return json.dumps(
            payload,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success_response(
    data: Any,
    message: str = "Success",
    status_code: int = 200,
) -> UTF8JSONResponse:
    """Sobre estándar de éxito: {success, message, data, timestamp}."""
    return UTF8JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "message": message,
            "data": data,
            "timestamp": utc_timestamp(),
        },
    )
