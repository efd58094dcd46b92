"""FastAPI application exposing the laundry reservation engine."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from smart_laundry import __version__
from smart_laundry.enterprise.config.settings import AppSettings, get_settings
from smart_laundry.enterprise.core import (
	InvalidDurationError,
	MachineBusyError,
	ReservationError,
	StorageFailureError,
	UnknownMachineError,
)
from smart_laundry.observability import configure_logging, configure_tracer
from smart_laundry.observability.metrics import REQUEST_COUNTER
from smart_laundry.server.api.routers import (
	alerts_router,
	health_router,
	machines_router,
	observability_router,
)
from smart_laundry.services import LaundryRuntime, build_runtime

logger = structlog.get_logger(__name__)

_ERROR_STATUS = {
	UnknownMachineError: status.HTTP_404_NOT_FOUND,
	MachineBusyError: status.HTTP_409_CONFLICT,
	InvalidDurationError: 422,
	StorageFailureError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def _reservation_error_handler(_request: Request, exc: Exception) -> JSONResponse:
	assert isinstance(exc, ReservationError)
	code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
	return JSONResponse(status_code=code, content={"detail": str(exc), "machine_id": exc.machine_id})


def create_app(
	settings: Optional[AppSettings] = None,
	*,
	runtime: Optional[LaundryRuntime] = None,
	start_poller: bool = True,
) -> FastAPI:
	"""Build the API around one runtime; pass ``runtime`` to inject a prepared one."""

	config = runtime.settings if runtime is not None else (settings or get_settings())
	configure_logging(config.logging)
	configure_tracer(config.telemetry)
	runtime = runtime or build_runtime(config)

	@asynccontextmanager
	async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
		if start_poller:
			await runtime.poller.start()
		try:
			yield
		finally:
			await runtime.poller.stop()
			runtime.close()

	app = FastAPI(title="Smart Laundry API", version=__version__, lifespan=lifespan)
	app.state.runtime = runtime

	FastAPIInstrumentor.instrument_app(app)

	@app.middleware("http")
	async def count_requests(request: Request, call_next):
		if config.telemetry.metrics_enabled:
			REQUEST_COUNTER.inc()
		return await call_next(request)

	for error_type in _ERROR_STATUS:
		app.add_exception_handler(error_type, _reservation_error_handler)

	app.include_router(health_router, prefix="/api/v1")
	app.include_router(machines_router, prefix="/api/v1")
	app.include_router(alerts_router, prefix="/api/v1")
	app.include_router(observability_router, prefix="/api/v1")

	@app.get("/")
	async def root() -> dict[str, str]:
		return {"message": "Smart Laundry API"}

	logger.info("app_created", machines=runtime.engine.catalog.ids(), environment=config.environment)
	return app
