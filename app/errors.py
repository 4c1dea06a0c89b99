"""
Error kinds raised by report operations and their HTTP mapping.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog


class ReportError(Exception):
    """Base class; carries the status code and a client-safe message."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ReportError):
    """Malformed or undecodable input."""

    status_code = 400
    default_message = "Invalid request"


class NotFound(ReportError):
    status_code = 404
    default_message = "Report not found"


class PermissionDenied(ReportError):
    status_code = 403
    default_message = "Permission denied"


class PersistenceError(ReportError):
    """Any storage fault: constraint violations, connectivity, commit failures."""

    status_code = 500
    default_message = "Database error"


def _report_error_handler(request: Request, exc: ReportError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    structlog.get_logger().info("request_validation_failed", path=request.url.path, errors=len(errors))
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    detail = f"Invalid request: {location}: {message}" if location else f"Invalid request: {message}"
    return JSONResponse(status_code=400, content={"detail": detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReportError, _report_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
