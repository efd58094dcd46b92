"""Versioned API routers."""

from .health import router as health
from .machines import router as machines

__all__ = ["health", "machines"]
