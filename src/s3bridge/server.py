"""FastAPI application factory and route setup for s3bridge."""

import json
import logging
import secrets
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import s3bridge.metrics as _metrics
from s3bridge.config import S3BridgeConfig
from s3bridge.errors import GatewayError, InternalError, InvalidRequest, MissingPath
from s3bridge.handlers.bucket import BucketHandler
from s3bridge.handlers.object import ObjectHandler
from s3bridge.metadata import create_metadata_index
from s3bridge.routing import Operation, parse_path, resolve_operation
from s3bridge.storage.backend import ObjectStore
from s3bridge.storage.local import LocalObjectStore

logger = logging.getLogger(__name__)

# Methods the catch-all route accepts; anything unmatched resolves to Invalid
_GATEWAY_METHODS = ["GET", "HEAD", "PUT", "POST", "DELETE", "PATCH", "OPTIONS"]

# Module-level singleton so multiple create_app() calls (e.g. in tests)
# don't re-register the same Prometheus collectors in the global registry.
_instrumentator = None


def _get_instrumentator():
    global _instrumentator
    if _instrumentator is None:
        from prometheus_fastapi_instrumentator import Instrumentator

        _instrumentator = Instrumentator(
            should_instrument_requests_inprogress=True,
            excluded_handlers=["/metrics"],
        )
    return _instrumentator


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(config: S3BridgeConfig) -> FastAPI:
    """Create and configure the s3bridge FastAPI application.

    The lifespan context manager opens the metadata index and object store
    on startup and closes them on shutdown.

    Args:
        config: The loaded s3bridge configuration.

    Returns:
        A configured FastAPI application ready to run.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        metadata = create_metadata_index(config.metadata)
        await metadata.init_db()
        app.state.metadata = metadata

        storage = _create_object_store(config)
        await storage.init()
        app.state.storage = storage

        logger.info(
            "Backends initialized: metadata=%s storage=%s",
            config.metadata.engine,
            config.storage.backend,
        )

        yield

        await storage.close()
        await metadata.close()
        logger.info("Metadata index and object store closed")

    app = FastAPI(
        title="s3bridge",
        version="0.1.0",
        lifespan=lifespan,
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
    )
    app.state.config = config

    _register_exception_handlers(app)
    _register_middleware(app, config)

    # /metrics must be registered before the catch-all gateway route.
    if config.observability.metrics:
        _metrics.init_metrics()
        _get_instrumentator().instrument(app, metric_namespace="s3bridge").expose(
            app, endpoint="/metrics"
        )

    _setup_routes(app, config)

    return app


def _create_object_store(config: S3BridgeConfig) -> ObjectStore:
    """Create an object store instance based on configuration.

    Supports 'local' and 'memory' backends.

    Args:
        config: The s3bridge configuration.

    Returns:
        An object store instance.

    Raises:
        ValueError: If the backend is unknown.
    """
    backend = config.storage.backend
    if backend == "local":
        return LocalObjectStore(config.storage.local_root)
    elif backend == "memory":
        from s3bridge.storage.memory import MemoryObjectStore

        return MemoryObjectStore(max_size_bytes=config.storage.memory_max_size_bytes)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the FastAPI app."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> Response:
        """Render a GatewayError as a plain-text response."""
        return PlainTextResponse(exc.message, status_code=exc.http_status)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        """Render router errors as plain text.

        A method outside ``_GATEWAY_METHODS`` never reaches the gateway
        route, so its 405 is mapped to the same 400 an unmatched dispatch
        produces.
        """
        if exc.status_code == 405:
            parsed = parse_path(request.url.path)
            error = MissingPath() if parsed.is_empty else InvalidRequest()
            _metrics.record_operation(Operation.INVALID.value, error.http_status)
            return PlainTextResponse(error.message, status_code=error.http_status)
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def _content_length(headers) -> int:
    """Return a Content-Length header as an int, 0 if missing or malformed."""
    value = headers.get("content-length")
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        return 0


def _register_middleware(app: FastAPI, config: S3BridgeConfig) -> None:
    """Register the request-id and access-log middleware."""

    # Paths to suppress from per-request logging
    _QUIET_PATHS = {"/metrics", "/health"}

    metrics_enabled = config.observability.metrics

    @app.middleware("http")
    async def common_headers_middleware(request: Request, call_next) -> Response:
        """Tag every response with a request id and log the request.

        Generates x-amz-request-id (16-char uppercase hex) and stores it on
        request.state. When metrics are enabled, also counts request and
        response body bytes.
        """
        request_id = secrets.token_hex(8).upper()
        request.state.request_id = request_id
        start = time.monotonic()

        response = await call_next(request)

        duration_ms = round((time.monotonic() - start) * 1000, 2)

        response.headers["x-amz-request-id"] = request_id
        response.headers["Server"] = "s3bridge"

        if metrics_enabled and _metrics.bytes_received_total is not None:
            req_size = _content_length(request.headers)
            if req_size > 0:
                _metrics.bytes_received_total.inc(req_size)
            resp_size = _content_length(response.headers)
            if resp_size > 0:
                _metrics.bytes_sent_total.inc(resp_size)

        if request.url.path not in _QUIET_PATHS:
            logger.info(
                "%s %s %d %.2fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "request_id": request_id,
                },
            )

        return response


# ---------------------------------------------------------------------------
# Health check helpers
# ---------------------------------------------------------------------------


async def _probe(component) -> dict:
    """Ping a backend and report its status and latency.

    Returns a dict with ``status`` and ``latency_ms`` keys.
    """
    if component is None:
        return {"status": "error", "error": "not initialized", "latency_ms": 0}
    start = time.monotonic()
    try:
        await component.ping()
    except Exception as exc:
        return {"status": "error", "error": str(exc), "latency_ms": 0}
    return {"status": "ok", "latency_ms": round((time.monotonic() - start) * 1000, 1)}


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


def _setup_routes(app: FastAPI, config: S3BridgeConfig) -> None:
    """Register the health check and the catch-all gateway route.

    Args:
        app: The FastAPI application to attach routes to.
        config: The s3bridge configuration.
    """
    bucket_handler = BucketHandler(app)
    object_handler = ObjectHandler(app)

    health_check_enabled = config.observability.health_check

    @app.get("/health")
    async def health_check(request: Request) -> Response:
        """Return health status.

        When health_check is enabled: ping the metadata index and the
        object store and report each. When disabled: return static
        ``{"status": "ok"}``.
        """
        if not health_check_enabled:
            return Response(
                content='{"status":"ok"}',
                media_type="application/json",
            )

        meta_check = await _probe(getattr(app.state, "metadata", None))
        storage_check = await _probe(getattr(app.state, "storage", None))
        all_ok = meta_check["status"] == "ok" and storage_check["status"] == "ok"

        body = json.dumps(
            {
                "status": "ok" if all_ok else "degraded",
                "checks": {
                    "metadata": meta_check,
                    "storage": storage_check,
                },
            }
        )
        return Response(
            content=body,
            status_code=200 if all_ok else 503,
            media_type="application/json",
        )

    @app.api_route("/{path:path}", methods=_GATEWAY_METHODS)
    async def gateway(request: Request) -> Response:
        """Dispatch any other request by method and path shape.

        Client errors are raised before any backend call. Any failure while
        an operation runs becomes a 500 ``Internal Error: {message}``.
        """
        parsed = parse_path(request.url.path)
        logger.debug("Parsed %s: bucket=%s key=%s", request.url.path, parsed.bucket, parsed.key)

        operation = resolve_operation(request.method, parsed)
        status = 500
        try:
            if parsed.is_empty:
                raise MissingPath()
            if operation is Operation.PUT:
                response = await object_handler.put_object(request, parsed.bucket, parsed.key)
            elif operation is Operation.GET:
                response = await object_handler.get_object(request, parsed.bucket, parsed.key)
            elif operation is Operation.LIST:
                response = await bucket_handler.list_objects(request, parsed.bucket)
            elif operation is Operation.DELETE:
                response = await object_handler.delete_object(request, parsed.bucket, parsed.key)
            else:
                raise InvalidRequest()
            status = response.status_code
        except GatewayError as exc:
            status = exc.http_status
            raise
        except Exception as exc:
            logger.exception("%s failed for %s", operation.value, request.url.path)
            raise InternalError(str(exc)) from exc
        finally:
            _metrics.record_operation(operation.value, status)

        return response
