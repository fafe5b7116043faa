# backend/utils/api_response.py
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

# Success envelope shared by every endpoint
def api_response(status_code: int, data: Any, message: str = "Success") -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "statusCode": status_code,
            "data": data,
            "message": message,
            "success": status_code < 400,
        }),
    )

# Bare {"status": code} body, used by the check-refresh endpoints
def status_response(status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": status_code})
