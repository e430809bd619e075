"""
Service-level error type.

Services raise ``ServiceError`` with a machine-readable code; the API layer
renders it as ``{"error": {"code", "message"}}`` with the mapped status.
"""
from typing import Dict, Optional


_DEFAULT_STATUS: Dict[str, int] = {
    "permission_denied": 403,
    "pro_required": 402,
    "missing_required": 422,
    "missing_required_field": 422,
    "no_data": 422,
    "not_found": 404,
    "duplicate": 409,
    "db_error": 500,
    "invalid_token": 401,
    "no_token": 401,
    "sharing_disabled": 409,
    "no_metrics": 404,
    "invalid_response": 502,
    "request_failed": 502,
}


def status_for_code(code: str) -> int:
    """Return the HTTP status associated with an error code."""
    if code in _DEFAULT_STATUS:
        return _DEFAULT_STATUS[code]
    if code.startswith("invalid_"):
        return 422
    return 400


class ServiceError(Exception):
    """Error raised by services when an operation cannot be completed."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code if status_code is not None else status_for_code(code)

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"ServiceError(code={self.code!r}, message={self.message!r})"
