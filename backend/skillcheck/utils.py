# response envelopes shared by every router
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any, message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": 1,
            "data": jsonable_encoder(data),
            "message": message,
            "status_code": status_code,
        },
    )


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": 0, "message": message})


def catch_response(error: Any, message: str) -> JSONResponse:
    if isinstance(error, Exception):
        error_message = str(error) or "An unexpected error occurred"
    elif isinstance(error, str):
        error_message = error
    else:
        error_message = "An unknown error occurred"
    return JSONResponse(
        status_code=500,
        content={"success": 0, "error": error_message, "message": message, "status_code": 500},
    )


def dump(schema, obj) -> dict:
    """Serialize an ORM object through a pydantic output schema."""
    return schema.model_validate(obj).model_dump(mode="json")
