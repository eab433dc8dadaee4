# store.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Optional, Protocol

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from .model import CompletedSet
from .ui.console import get_console

# ---------------------------------------------------------------------
# Persistence boundary
# ---------------------------------------------------------------------
# GraphStateStore talks to a plain key-value store holding strings:
#
#   get(key) -> str | None
#   set(key, value)
#
# The completed set is stored as a JSON list of ids under a single key.
# Reads never fail the caller (anything unreadable is "no data"), writes
# are best effort.
# ---------------------------------------------------------------------


DEFAULT_STATE_KEY = "ramosAprobados"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Dict-backed store; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileKeyValueStore:
    """
    File-backed store:
      path  ->  {"<key>": "<value>", ...}

    Writes go to a temp file first and are renamed into place.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(data, sort_keys=True, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self.path)
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)


class Base(DeclarativeBase):
    pass


class KVEntry(Base):
    __tablename__ = "kv_entries"
    key: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    value: Mapped[str] = mapped_column(sa.Text, nullable=False)


class SqlKeyValueStore:
    """SQL table store (SQLite by default). Creates its table on first use."""

    def __init__(self, url: str = "sqlite:///.malla/state.db"):
        self.url = url
        self.engine = sa.create_engine(url)
        self._ready = False

    def _ensure_table(self) -> None:
        # nothing touches disk until the first get/set
        if self._ready:
            return
        if self.url.startswith("sqlite:///") and self.url != "sqlite:///:memory:":
            Path(self.url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(self.engine)
        self._ready = True

    def get(self, key: str) -> Optional[str]:
        self._ensure_table()
        with Session(self.engine) as s:
            entry = s.get(KVEntry, key)
            return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        self._ensure_table()
        with Session(self.engine) as s, s.begin():
            entry = s.get(KVEntry, key)
            if entry:
                entry.value = value
            else:
                s.add(KVEntry(key=key, value=value))


# ---------------------------------------------------------------------
# GraphStateStore
# ---------------------------------------------------------------------

def encode_completed(completed: CompletedSet) -> str:
    return json.dumps(sorted(completed), ensure_ascii=False)


def _parse_completed(raw: str) -> Optional[CompletedSet]:
    """None when `raw` is not a JSON list of strings."""
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        return None
    return frozenset(data)


def decode_completed(raw: Optional[str]) -> CompletedSet:
    """Parse a stored value. Anything that is not a JSON list of strings is empty."""
    if not raw:
        return frozenset()
    parsed = _parse_completed(raw)
    return parsed if parsed is not None else frozenset()


class GraphStateStore:
    """Owns the persisted completed set."""

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_STATE_KEY):
        self.kv = kv
        self.key = key

    def load(self) -> CompletedSet:
        try:
            raw = self.kv.get(self.key)
        except Exception as e:
            get_console().print_debug(f"state read failed, using empty set: {e}")
            return frozenset()

        if not raw:
            return frozenset()
        completed = _parse_completed(raw)
        if completed is None:
            get_console().print_debug(f"ignoring malformed state under {self.key!r}")
            return frozenset()
        return completed

    def save(self, completed: CompletedSet) -> None:
        try:
            self.kv.set(self.key, encode_completed(completed))
        except Exception as e:
            get_console().print_debug(f"state write failed (ignored): {e}")
