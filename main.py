"""
Main API module for the URL shortener.

Responsibilities:
    - Expose endpoints to shorten URLs (plain text, JSON, JSON batch)
    - Redirect tokens to their original URL (410 once deleted)
    - List and asynchronously delete the caller's own links
    - Report database health on /ping

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - Storage engine chosen by the factory (database, file or memory).
    - URLManager applies the "already exists" rule and token retries.
    - Users are identified by a signed cookie (see the `auth` package).
    - Storage calls get a deadline REQUEST_TIMEOUT seconds after the route
      starts; an overrun surfaces as a 500 through the IO error kind.

Status mapping for storage errors:
    INVALID_INPUT 400, URL_EXISTS 409, URL_DELETED 410, NOT_FOUND 404,
    TOKEN_TAKEN / IO 500.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from auth import get_current_user, install_cookie_auth
from shortener.config import load_settings
from shortener.manager.delete_worker import DeleteWorker
from shortener.manager.url_manager import URLManager, is_valid_url
from shortener.schemas import BatchRequestItem, BatchResponseItem, DeleteRequest, ShortenRequest, ShortenResponse, UserURL
from shortener.storage.base import BaseStorage, StorageType
from shortener.storage.errors import ErrorKind, NotFoundError, StorageError, StorageIOError, URLDeletedError
from shortener.storage.storage_factory import get_storage

STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TOKEN_TAKEN: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.URL_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.URL_DELETED: status.HTTP_410_GONE,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.IO: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(settings=None, storage: Optional[BaseStorage] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        settings: Settings object; defaults to a fresh `load_settings()`.
        storage (Optional[BaseStorage]): Engine to use; defaults to `get_storage()`.

    Returns:
        FastAPI: A fully configured application instance with its own
                 storage engine and delete worker.

    Why an app factory?
        - Enables per-test isolation in pytest.
        - Encourages dependency injection and easy swapping of implementations.
        - Avoids accidental global state across workers/processes.
    """
    settings = settings or load_settings()

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)
    log = logging.getLogger("shortener")

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    if storage is None:
        storage = get_storage(settings.DATABASE_DSN, settings.FILE_STORAGE_PATH)
    url_manager = URLManager(storage)
    delete_worker = DeleteWorker(
        storage,
        max_workers=settings.DELETE_WORKERS,
        max_pending=settings.DELETE_QUEUE_SIZE,
        job_timeout=settings.REQUEST_TIMEOUT,
    )
    log.info("Storage engine: %s", storage.get_storage_type().value)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        delete_worker.shutdown(wait=True)
        storage.close()

    app = FastAPI(
        title="URL Shortener",
        description="URL shortener with memory, file and PostgreSQL storage engines",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.url_manager = url_manager
    app.state.delete_worker = delete_worker

    install_cookie_auth(app, settings.SECRET_KEY)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if code >= 500:
            log.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"detail": str(exc)}, status_code=code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"detail": "bad request"}, status_code=status.HTTP_400_BAD_REQUEST)

    # ----------------------------------------------------------------
    # Utilities
    # ----------------------------------------------------------------
    def _short_url(token: str, request: Request) -> str:
        if settings.BASE_URL:
            return f"{settings.BASE_URL}/{token}"
        host = request.headers.get("host") or request.url.netloc
        return f"http://{host}/{token}"

    def request_deadline() -> float:
        """Absolute `time.monotonic()` deadline for the storage calls of one request."""
        return time.monotonic() + settings.REQUEST_TIMEOUT

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.post("/")
    async def encode_plain(
        request: Request,
        user_id: str = Depends(get_current_user),
        deadline: float = Depends(request_deadline),
    ) -> Response:
        """
        Shorten the URL sent as the raw request body.

        Returns:
            201 with the short URL as text, or 409 with the existing one.
        """
        body = (await request.body()).decode("utf-8", errors="replace").strip()
        if not body or not is_valid_url(body):
            return PlainTextResponse("bad request: incorrect long URL", status_code=status.HTTP_400_BAD_REQUEST)
        token, exists = await run_in_threadpool(url_manager.encode, body, user_id, deadline=deadline)
        code = status.HTTP_409_CONFLICT if exists else status.HTTP_201_CREATED
        return PlainTextResponse(_short_url(token, request), status_code=code)

    @app.post("/api/shorten")
    def encode_json(
        req: ShortenRequest,
        request: Request,
        user_id: str = Depends(get_current_user),
        deadline: float = Depends(request_deadline),
    ) -> JSONResponse:
        """Shorten `{"url": ...}`; answers `{"result": short_url}` with 201 or 409."""
        if not req.url:
            return JSONResponse({"detail": "bad request: incorrect url"}, status_code=status.HTTP_400_BAD_REQUEST)
        token, exists = url_manager.encode(req.url, user_id, deadline=deadline)
        payload = ShortenResponse(result=_short_url(token, request))
        code = status.HTTP_409_CONFLICT if exists else status.HTTP_201_CREATED
        return JSONResponse(payload.model_dump(), status_code=code)

    @app.post("/api/shorten/batch")
    def encode_batch(
        items: List[BatchRequestItem],
        request: Request,
        user_id: str = Depends(get_current_user),
        deadline: float = Depends(request_deadline),
    ) -> JSONResponse:
        """Shorten many URLs at once; one `short_url` per `correlation_id`."""
        if not items:
            return JSONResponse({"detail": "bad request: empty batch"}, status_code=status.HTTP_400_BAD_REQUEST)
        if any(not item.original_url for item in items):
            return JSONResponse({"detail": "bad request: empty url"}, status_code=status.HTTP_400_BAD_REQUEST)
        tokens = url_manager.encode_batch([item.original_url for item in items], user_id, deadline=deadline)
        payload = [
            BatchResponseItem(correlation_id=item.correlation_id, short_url=_short_url(token, request)).model_dump()
            for item, token in zip(items, tokens)
        ]
        return JSONResponse(payload, status_code=status.HTTP_201_CREATED)

    @app.get("/api/user/urls")
    def user_urls(
        request: Request,
        user_id: str = Depends(get_current_user),
        deadline: float = Depends(request_deadline),
    ) -> Response:
        """List the caller's live links; 204 when there are none."""
        records = [record for record in storage.get_user_urls(user_id, deadline=deadline) if record.is_live]
        if not records:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        payload = [
            UserURL(short_url=_short_url(record.token, request), original_url=record.original_url).model_dump()
            for record in records
        ]
        return JSONResponse(payload)

    @app.delete("/api/user/urls")
    def delete_user_urls(body: DeleteRequest, user_id: str = Depends(get_current_user)) -> Response:
        """
        Queue a soft delete of `tokens` for the caller and answer 202 at once.

        The delete itself runs on the background worker; errors there are
        logged, never reported to the client. 503 when the queue is full.
        """
        tokens = body.root
        if not delete_worker.submit(user_id, tokens):
            log.warning("Delete queue full; rejecting %d tokens for user %s", len(tokens), user_id)
            return PlainTextResponse("delete queue is full", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(status_code=status.HTTP_202_ACCEPTED)

    @app.get("/ping")
    def ping() -> Response:
        """Health check: 200 when the database engine is active and reachable."""
        if storage.get_storage_type() != StorageType.DATABASE or storage.get_db_pool() is None:
            return PlainTextResponse("database not configured", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        from shortener.storage.database import ping_pool

        try:
            ping_pool(storage.get_db_pool())
        except StorageIOError as exc:
            log.error("Ping failed: %s", exc)
            return PlainTextResponse("internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return PlainTextResponse("OK")

    @app.get("/{token}")
    def redirect(token: str, deadline: float = Depends(request_deadline)) -> Response:
        """
        Redirect to the original URL with 307.

        Deleted links answer 410 Gone; unknown tokens answer 400.
        """
        try:
            long_url = url_manager.decode(token, deadline=deadline)
        except URLDeletedError:
            return PlainTextResponse("URL was deleted", status_code=status.HTTP_410_GONE)
        except NotFoundError:
            return PlainTextResponse(
                "bad request: unable to decode provided token", status_code=status.HTTP_400_BAD_REQUEST
            )
        return RedirectResponse(url=long_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    return app


# Backward compatibility for uvicorn and legacy imports:
# `uvicorn main:app` and `from main import app` continue to work.
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = app.state.settings
    uvicorn.run(app, host=_settings.server_host, port=_settings.server_port)
