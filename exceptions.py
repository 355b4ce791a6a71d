"""
Custom Exceptions for the UniArchive API
========================================

Raised by the catalog, stats, OTP and assistant modules and mapped to a
JSON `{"message": ...}` body by the handlers registered in main.py.

Usage:
    from exceptions import NotFoundError

    if not doc:
        raise NotFoundError("Resource", resource_id)
"""

from typing import Optional, Any, Dict


class CatalogError(Exception):
    """Base exception for all API errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(CatalogError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class NotFoundError(CatalogError):
    """Resource, comment or OTP record absent"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str = ""):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class InvalidActionError(CatalogError):
    """Unrecognized interaction action"""

    status_code = 400

    def __init__(self, action: str):
        super().__init__(
            "Invalid action",
            code="INVALID_ACTION",
            details={"action": action}
        )


class UpstreamError(CatalogError):
    """Third-party completion service failed or timed out"""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        details = {"upstream_status": upstream_status} if upstream_status else {}
        super().__init__(message, code="UPSTREAM_ERROR", details=details)


class InternalError(CatalogError):
    """Unhandled store or runtime fault"""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")
