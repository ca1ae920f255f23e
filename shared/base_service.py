"""
FastAPI service shell shared by the Word of the Day services.
"""

import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST

from shared.config import BaseConfig
from shared.errors import ServiceException
from shared.logging import clear_context, configure_logging, get_logger, set_request_id
from shared.metrics import get_metrics_collector

SERVICE_VERSION = "1.0.0"
REQUEST_ID_HEADER = "X-Request-ID"


class BaseService:
    """
    Owns the FastAPI app, its metrics collector and the operational routes.

    Subclasses add their own routes after ``super().__init__`` and may
    override ``_check_dependencies`` to enrich ``/health``.
    """

    def __init__(self, service_name: str, config: Optional[BaseConfig] = None):
        self.service_name = service_name
        self.config = config or BaseConfig()
        self.port = self.config.port
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)

        self.app = self._create_app()
        self._install_request_middleware()
        self._register_operational_routes()
        self._register_error_handlers()

    def _create_app(self) -> FastAPI:
        title = self.service_name.replace("_", " ").title()
        docs_enabled = self.config.env == "local"
        return FastAPI(
            title=f"{title} Service",
            version=SERVICE_VERSION,
            docs_url="/docs" if docs_enabled else None,
            redoc_url="/redoc" if docs_enabled else None,
        )

    def _install_request_middleware(self):
        """Tag every request with a correlation id, then time and log it."""
        # Read-only public API: any origin may GET, nothing else
        self.app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"])

        @self.app.middleware("http")
        async def correlate_and_time(request: Request, call_next):
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            started = time.perf_counter()
            try:
                response = await call_next(request)
            finally:
                clear_context()
            elapsed = time.perf_counter() - started

            path = request.url.path
            self.metrics.record_http_request(request.method, path, response.status_code, elapsed)
            self.logger.info(
                "HTTP request",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=round(elapsed * 1000, 2),
                request_id=request_id,
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

    def _register_operational_routes(self):

        @self.app.get("/health", tags=["Operations"])
        async def health():
            try:
                dependencies = await self._check_dependencies()
            except Exception as exc:
                self.logger.error("Health check failed", error=str(exc))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={"service": self.service_name, "status": "error", "error": str(exc)},
                )

            self.metrics.record_health_check("ok")
            return {
                "service": self.service_name,
                "status": "ok",
                "version": SERVICE_VERSION,
                "uptime_seconds": round(time.time() - self._start_time, 3),
                "dependencies": dependencies,
            }

        @self.app.get("/metrics", tags=["Operations"])
        async def metrics():
            return Response(content=self.metrics.export(), media_type=CONTENT_TYPE_LATEST)

    def _register_error_handlers(self):

        @self.app.exception_handler(ServiceException)
        async def on_service_exception(request: Request, exc: ServiceException):
            self.logger.error("Service error", code=exc.code, message=exc.message, details=exc.details)
            self.metrics.record_error(exc.code)
            return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())

        @self.app.exception_handler(Exception)
        async def on_unhandled_exception(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={"code": "INTERNAL_ERROR", "message": "Internal server error", "details": {}},
            )

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Report dependency state for ``/health``. Override in subclasses."""
        return {}

    def run(self):
        """Serve the app with uvicorn."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower(),
        )
