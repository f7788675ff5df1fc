from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from typing import Any, Optional


def success_resp(data: Any = None, status_code: int = 200):
    """
    Plain JSON success response (no envelope, the frontend reads the body as-is)
    """
    return JSONResponse(status_code=status_code, content=jsonable_encoder(data))


def error_resp(message: str, status_code: int = 500, details: Optional[str] = None):
    """
    Standardized Error Response: {"error": ...} plus "details" for server-side failures
    """
    content = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))
