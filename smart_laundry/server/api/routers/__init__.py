"""API routers exposed by the server package."""

from .v1.alerts import router as alerts_router
from .v1.health import router as health_router
from .v1.machines import router as machines_router
from .v1.observability import router as observability_router

__all__ = [
	"alerts_router",
	"health_router",
	"machines_router",
	"observability_router",
]
