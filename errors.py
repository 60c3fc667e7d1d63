from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from logging_config import get_logger

logger = get_logger(__name__)


class RelayError(Exception):
    status = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(RelayError):
    """Missing or malformed required input (e.g. no roomId)."""
    status = 400


class NotFoundError(RelayError):
    """The operation targets a room that is not in the store."""
    status = 404

    def __init__(self, message: str = "Room not found"):
        super().__init__(message)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        logger.info(f"{request.method} {request.url.path} rejected with {exc.status}: {exc.message}")
        return JSONResponse(status_code=exc.status, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path} rejected: malformed body")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": jsonable_errors(exc)},
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
