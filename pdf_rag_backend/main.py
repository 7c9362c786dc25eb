from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pdf_rag_backend.api import router as api_router
from pdf_rag_backend.core.clients import RagClients, build_clients
from pdf_rag_backend.core.config import Settings, settings as default_settings
from pdf_rag_backend.core.errors import ConfigurationError, RagError
from pdf_rag_backend.core.logging_config import configure_logging

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid request"))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Settings | None = None, clients: RagClients | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.rag_clients = clients
        app.state.rag_error = None
        if clients is None:
            try:
                app.state.rag_clients = build_clients(settings)
            except ConfigurationError as exc:
                # keep serving so every RAG call reports the setup problem
                app.state.rag_error = exc
                logger.error("rag_service_unavailable", error=exc.message)
        yield

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.exception_handler(RagError)
    async def rag_error_handler(request: Request, exc: RagError):
        log = logger.bind(path=request.url.path, error_type=type(exc).__name__)
        if exc.status_code >= 500:
            log.error("request_failed", error=exc.message)
        else:
            log.info("request_rejected", error=exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error(404, "Endpoint not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return _error(500, "Internal server error")

    @app.get("/health")
    def health(request: Request):
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "ragReady": getattr(request.app.state, "rag_clients", None) is not None,
        }

    return app


app = create_app()
