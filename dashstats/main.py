from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import time
from typing import Optional

from opentelemetry.trace import get_current_span

from dashstats.core.config import Settings, settings
from dashstats.api.routes.analytics import router as analytics_router
from dashstats.api.routes.health import router as health_router
from dashstats.utils.envelopes import api_error
from dashstats.utils.exceptions import AppException


_logger = logging.getLogger("dashstats.api")


def _trace_id() -> Optional[str]:
	_current_span = get_current_span()
	trace_id_int = _current_span.get_span_context().trace_id if _current_span else 0
	return f"{trace_id_int:032x}" if trace_id_int else None


def _configure_telemetry(app: FastAPI, cfg: Settings) -> None:
	try:
		if cfg.ENABLE_APP_INSIGHTS and cfg.AZURE_MONITOR_CONN_STR:
			from azure.monitor.opentelemetry import configure_azure_monitor
			from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
			from opentelemetry.instrumentation.logging import LoggingInstrumentor

			configure_azure_monitor(
				connection_string=cfg.AZURE_MONITOR_CONN_STR,
				sampling_ratio=cfg.SAMPLING_RATIO,
			)
			# Include trace/span ids in stdlib logging records
			LoggingInstrumentor().instrument(set_logging_format=True)
			FastAPIInstrumentor.instrument_app(app)
			_logger.info("Azure Monitor telemetry is enabled")
	except Exception as telemetry_exc:
		# Do not block app startup if telemetry fails
		_logger.warning("Failed to initialize Azure Monitor telemetry: %s", telemetry_exc)


def create_app(cfg: Settings = settings) -> FastAPI:
	app = FastAPI(title=cfg.APP_NAME, debug=cfg.DEBUG)
	app.state.settings = cfg

	_configure_telemetry(app, cfg)

	# Dashboard is served from another origin
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	# Normalize API prefix (must not end with '/')
	_api_prefix = cfg.API_PREFIX.rstrip("/")

	app.include_router(health_router, prefix=_api_prefix)
	if cfg.ANALYTICS_ENABLED:
		app.include_router(analytics_router, prefix=f"{_api_prefix}{cfg.ANALYTICS_PATH}")
	else:
		_logger.info("Analytics endpoint disabled")

	# Structured request logging (includes trace correlation where available)
	@app.middleware("http")
	async def request_logging_middleware(request: Request, call_next):
		start_time = time.perf_counter()
		client_ip: Optional[str] = request.headers.get("x-forwarded-for") or (request.client.host if request.client else None)
		status_code: Optional[int] = None
		try:
			response = await call_next(request)
			status_code = response.status_code
			return response
		except Exception:
			_logger.exception(
				"Unhandled exception during request",
				extra={
					"http.method": request.method,
					"http.route": request.url.path,
					"net.peer.ip": client_ip,
					"trace_id": _trace_id(),
				},
			)
			raise
		finally:
			elapsed_ms = (time.perf_counter() - start_time) * 1000.0
			_logger.info(
				"HTTP request",
				extra={
					"http.method": request.method,
					"http.route": request.url.path,
					"http.status_code": status_code,
					"http.duration_ms": round(elapsed_ms, 2),
					"net.peer.ip": client_ip,
					"http.user_agent": request.headers.get("user-agent"),
					"trace_id": _trace_id(),
				},
			)

	@app.exception_handler(AppException)
	async def app_exception_handler(request: Request, exc: AppException):
		_logger.warning(
			"Request failed: %s",
			exc.code,
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"error.code": exc.code,
				"trace_id": _trace_id(),
			},
		)
		return JSONResponse(status_code=exc.status_code, content=api_error(exc.message))

	@app.exception_handler(Exception)
	async def unhandled_exception_handler(request: Request, exc: Exception):
		_logger.exception(
			"Unhandled exception",
			extra={
				"http.method": request.method,
				"http.route": request.url.path,
				"trace_id": _trace_id(),
			},
		)
		return JSONResponse(status_code=500, content=api_error("Internal server error"))

	@app.get("/")
	async def root():
		return {"service": cfg.APP_NAME, "status": "ok"}

	return app


app = create_app()
