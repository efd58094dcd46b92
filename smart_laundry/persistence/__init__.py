"""Persistence layer: the state store contract and its backends."""

from .database import dispose_engine, init_engine, metadata
from .memory import InMemoryStateStore
from .repository import SqlStateStore
from .store import StateStore, decode_record, encode_record

__all__ = [
    "StateStore",
    "InMemoryStateStore",
    "SqlStateStore",
    "init_engine",
    "dispose_engine",
    "metadata",
    "encode_record",
    "decode_record",
]
