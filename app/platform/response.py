from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Wraps every API payload in the same envelope:

        {"status_code": 200, "status": "success", "message": "...", "data": {...}}

    ``status`` is "success" below 400 and "error" otherwise. Pydantic models in
    ``data`` are serialised with their camelCase aliases.
    """
    body = jsonable_encoder(data, by_alias=True) if data is not None else {}

    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "status": "success" if status_code < 400 else "error",
            "message": message,
            "data": body,
        },
    )
