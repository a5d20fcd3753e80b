from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.api.credit_routes import router as credit_router
from app.api.rewrite_routes import router as rewrite_router
from app.container import Container
from app.credits.exceptions import InsufficientCreditsError, UserNotFoundError
from app.database.exceptions import PersistenceError
from app.jobs.exceptions import JobNotFoundError, MissingInputError
from app.logging.logger import Log


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _bad_request(request: Request, exc: Exception) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


async def _persistence_failure(request: Request, exc: Exception) -> JSONResponse:
    Log.error(f"{request.method} {request.url.path} failed: {exc}")
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An error occurred while processing the request",
    )


def create_app(container: Container) -> FastAPI:
    app = FastAPI(title="Resume Rewrite Service")
    app.state.container = container

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        return {"status": "ok"}

    app.add_exception_handler(MissingInputError, _bad_request)
    app.add_exception_handler(InsufficientCreditsError, _bad_request)
    app.add_exception_handler(JobNotFoundError, _not_found)
    app.add_exception_handler(UserNotFoundError, _not_found)
    app.add_exception_handler(PersistenceError, _persistence_failure)

    app.include_router(rewrite_router)  # /rewrites/*
    app.include_router(credit_router)  # /credits/*
    return app
