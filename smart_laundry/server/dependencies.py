"""Dependency providers for the API layer.

The runtime is created by :func:`smart_laundry.server.app.create_app` and
kept on ``app.state``; routes reach it through these providers.
"""

from __future__ import annotations

from fastapi import Request

from smart_laundry.enterprise.config.settings import AppSettings
from smart_laundry.services import LaundryRuntime, ReservationEngine, ScanSession

__all__ = [
    "get_runtime",
    "get_engine",
    "get_scan_session",
    "get_app_settings",
]


def get_runtime(request: Request) -> LaundryRuntime:
    return request.app.state.runtime


def get_engine(request: Request) -> ReservationEngine:
    return get_runtime(request).engine


def get_scan_session(request: Request) -> ScanSession:
    """A fresh scan session per request; HTTP carries the selection itself."""

    return ScanSession(get_engine(request))


def get_app_settings(request: Request) -> AppSettings:
    return get_runtime(request).settings
