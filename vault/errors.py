"""
Failure taxonomy shared by services and routers.

Every error renders as ``{"ok": false, "error": <message>}`` with the
error's HTTP status. Services raise these; routers let them propagate and
wrap anything unexpected in ``UnknownFailure``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class VaultError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def payload(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.message}


class InvalidArgument(VaultError):
    status_code = 400


class NotFound(VaultError):
    status_code = 404


class UpstreamFailure(VaultError):
    """An AI or link-preview provider answered with an error or an unusable body."""

    status_code = 502

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: str | None = None
    ):
        super().__init__(message, status_code)
        self.body = body

    def payload(self) -> Dict[str, Any]:
        data = super().payload()
        data["status"] = self.status_code
        if self.body:
            data["detail"] = self.body
        return data


class PersistenceFailure(VaultError):
    """The store write failed after the upstream computation succeeded."""

    status_code = 500

    def __init__(self, message: str, result: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.result = result or {}

    def payload(self) -> Dict[str, Any]:
        return {**super().payload(), "saved": False, **self.result}


class UnknownFailure(VaultError):
    status_code = 500


async def vault_error_handler(request: Request, exc: VaultError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field or 'body'}: {err.get('msg', 'invalid')}")
    message = "; ".join(problems) or "invalid request"
    return JSONResponse(status_code=400, content={"ok": False, "error": message})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VaultError, vault_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
