"""Response envelope helpers shared by routes and middleware."""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from shopally.models.product import Envelope, ErrorDetail


def ok_response(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=Envelope(data=data).model_dump(mode="json"))


def error_response(status_code: int, code: str, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Build a JSON response using the standard error envelope."""
    body = Envelope(data=None, error=ErrorDetail(code=code, message=message)).model_dump(mode="json")
    return JSONResponse(status_code=status_code, content=body, headers=headers)
