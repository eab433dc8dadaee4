from __future__ import annotations
import os

from .store import (
    DEFAULT_STATE_KEY,
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    SqlKeyValueStore,
)

CATALOG_PATH = os.environ.get("MALLA_CATALOG")
BACKEND = os.environ.get("MALLA_BACKEND", "file")
STATE_PATH = os.environ.get("MALLA_STATE_PATH", ".malla/state.json")
DATABASE_URL = os.environ.get("MALLA_DATABASE_URL", "sqlite:///.malla/state.db")
STATE_KEY = os.environ.get("MALLA_STATE_KEY", DEFAULT_STATE_KEY)

BACKENDS = ("file", "sqlite", "memory")


def make_kv_store(
    backend: str = BACKEND,
    *,
    state_path: str = STATE_PATH,
    database_url: str = DATABASE_URL,
) -> KeyValueStore:
    if backend == "file":
        return JsonFileKeyValueStore(state_path)
    if backend == "sqlite":
        return SqlKeyValueStore(database_url)
    if backend == "memory":
        return MemoryKeyValueStore()
    raise ValueError(f"Unknown state backend: {backend!r}. Choose one of: {', '.join(BACKENDS)}")
