"""HTTP translation of domain exceptions."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers


def _detail(exc):
    messages = getattr(exc, "messages", None)
    return messages if messages else str(exc)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": _detail(exc)})


async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": _detail(exc)})


async def _conflict(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": _detail(exc)})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then pin the storefront's status codes."""
    register_exception_handlers(app)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(ValidationError, _invalid)
    app.add_exception_handler(InvalidOperationError, _conflict)
