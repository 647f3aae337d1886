"""
FastAPI application factory for the advocate directory.

Usage:
    python -m api.app                              # Dev server on port 8000
    APP_DB_PATH=advocates.sqlite python -m api.app # Serve from the SQLite store

OpenAPI docs available at http://localhost:8000/docs after starting.

Record source selection happens once in create_app():
    APP_DB_PATH set                  → SQLite store
    unset, APP_STORE_FALLBACK=fixture → static fixture dataset (default)
    unset, APP_STORE_FALLBACK=error   → every query answers 500

Logging: text by default, newline-delimited JSON when APP_LOG_FORMAT=json.
CORS origins come from APP_CORS_ORIGINS.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from api.errors import AdvocateError, InvalidQueryError
from api.routes import advocates
from api.routes import frontend as frontend_routes
from api.sources import AdvocateSource, select_source
from utils.config import AppConfig
from utils.formatting import format_phone_number, results_summary

# ── Configuration ─────────────────────────────────────────────────────────────
_cfg = AppConfig.from_env()

# ── Structured JSON logging ──────────────────────────────────────────────────


class _JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Merge extra fields added via logger.info("...", extra={...})
        for key in ("method", "path", "status", "duration_ms", "request_id"):
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


_logger = logging.getLogger("advocate_api")
_handler = logging.StreamHandler()
if _cfg.log_format == "json":
    _handler.setFormatter(_JsonFormatter())
else:
    _handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
logging.basicConfig(handlers=[_handler], level=logging.INFO, force=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warn about a missing store file on startup; release the pool on shutdown."""
    config: AppConfig = app.state.config
    if config.db_path is not None and not config.db_path.exists():
        _logger.warning(
            "Store not found at %s. Run 'python build_advocates_db.py' first.",
            config.db_path,
        )
    yield
    app.state.advocate_source.close()


def create_app(
    config: AppConfig | None = None,
    source: AdvocateSource | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the environment.
        source: Record source override (tests); defaults to the one
            select_source() picks for *config*.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or _cfg
    if source is None:
        source = select_source(config)

    app = FastAPI(
        title="Advocate Directory API",
        summary="Search and browse advocates by name, location, credential and specialty.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "advocates",
                "description": "Paginated free-text search over advocate records.",
            },
            {
                "name": "meta",
                "description": "Health check.",
            },
        ],
    )
    app.state.config = config
    app.state.advocate_source = source

    # ── CORS middleware ────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )

    # ── Request logging middleware ────────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log each request with a short request id and its duration."""
        request_id = str(uuid.uuid4())[:8]
        start = time.monotonic()
        path = request.url.path

        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        if config.log_format == "json":
            _logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "request_id": request_id,
                },
            )
        else:
            _logger.info(
                "method=%s path=%s status=%d duration_ms=%.1f rid=%s",
                request.method, path, response.status_code, duration_ms,
                request_id,
            )
        return response

    # ── Content Security Policy + security headers ───────────────────────────

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        """Add Content-Security-Policy, X-Content-Type-Options, and X-Frame-Options."""
        response = await call_next(request)
        # htmx is loaded from unpkg; the page has no inline scripts.
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' unpkg.com; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; "
            "connect-src 'self';"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    # ── Error handling ────────────────────────────────────────────────────────

    @app.exception_handler(AdvocateError)
    async def advocate_error_handler(request: Request, exc: AdvocateError):
        if exc.status_code >= 500:
            _logger.error(
                "Error fetching advocates path=%s query=%s: %s context=%r",
                request.url.path, request.url.query, exc, exc.context,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        body = InvalidQueryError(jsonable_encoder(exc.errors())).to_body()
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions and return JSON instead of HTML traceback."""
        _logger.exception("Unhandled error path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"], summary="Health check")
    def health():
        """Return 200 OK if the record source can be counted."""
        current: AdvocateSource = app.state.advocate_source
        try:
            count = current.count()
        except AdvocateError as exc:
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "source": current.name,
                         "error": exc.public_message},
            )
        return {"status": "ok", "source": current.name, "advocates": count}

    # ── Register routers ──────────────────────────────────────────────────────

    app.include_router(advocates.router, prefix="/api")

    # ── Static files + Jinja2 templates ───────────────────────────────────────
    _here = Path(__file__).parent.parent  # project root

    static_dir = _here / "static"
    templates_dir = _here / "templates"

    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    if templates_dir.exists():
        templates = Jinja2Templates(directory=str(templates_dir))
        templates.env.filters["fmt_phone"] = format_phone_number
        templates.env.filters["results_summary"] = results_summary

        frontend_routes.set_templates(templates)
        app.include_router(frontend_routes.router)

    return app


# Singleton instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.app:app",
        host=_cfg.api_host,
        port=_cfg.api_port,
        reload=True,
        log_level="info",
    )
