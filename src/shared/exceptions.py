"""
Error contract
Every failure leaves the API as {code, message, details?, correlation_id?}.
Services raise DomainError subclasses; the handlers below do the HTTP mapping.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.error_codes import ERROR_CODES
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class DomainError(Exception):
    """Base class for domain-level errors. Services should raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.__class__.__name__
        super().__init__(self.message)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(DomainError):
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotConfiguredError(DomainError):
    """A required integration setting (token, inbox, SMTP host) is missing."""
    code = "not_configured"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class UpstreamError(DomainError):
    code = "upstream_error"
    status_code = status.HTTP_502_BAD_GATEWAY


# ───────────────────────────── Helpers ──────────────────────────────────────

def problem(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def _request_id(req: Request) -> Optional[str]:
    return getattr(req.state, "request_id", None)


def _code_for_status(status_code: int) -> str:
    for code, entry in ERROR_CODES.items():
        if entry["http"] == status_code:
            return code
    return "internal_error"


def _contract_response(req: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=problem(code, message, details, _request_id(req)))


# ─────────────────────────── Handlers ───────────────────────────

async def handle_domain_error(req: Request, exc: DomainError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("Request failed", code=exc.code, error=exc.message, path=req.url.path)
    return _contract_response(req, exc.status_code, exc.code, exc.message, exc.details)


async def handle_request_validation(req: Request, exc: RequestValidationError) -> JSONResponse:
    entry = ERROR_CODES["validation_error"]
    return _contract_response(req, entry["http"], "validation_error", entry["message"], {"errors": exc.errors()})


async def handle_http_exception(req: Request, exc: StarletteHTTPException) -> JSONResponse:
    # routes raise HTTPException(detail="<error code>") for contract errors
    detail = exc.detail
    code = detail if isinstance(detail, str) and detail in ERROR_CODES else _code_for_status(exc.status_code)
    message = ERROR_CODES.get(code, {}).get("message", code)
    return _contract_response(req, exc.status_code, code, message, detail if isinstance(detail, dict) else None)


async def handle_unexpected(req: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=req.url.path, exc_info=exc)
    entry = ERROR_CODES["internal_error"]
    return _contract_response(req, entry["http"], "internal_error", entry["message"], {"type": exc.__class__.__name__})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
