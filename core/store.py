from __future__ import annotations
"""Document-store port and an in-memory implementation.

Paths follow the usual document-database convention: a *collection* path has
an odd number of segments (``users/u1/chatSessions``) and a *document* path an
even number (``users/u1/chatSessions/abc``).

Writes may carry the :data:`SERVER_TIMESTAMP` sentinel in place of a value; the
store replaces it with its own clock at write time.  Timestamps handed out by
one store are strictly increasing so ordering by them reproduces write order.

The in-memory store optionally mirrors its content to a JSON file, written to
a temp file first and then atomically renamed.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from core.errors import StoreError
from core.logging import logger

__all__ = [
    "SERVER_TIMESTAMP",
    "Document",
    "Filter",
    "DocumentStore",
    "InMemoryDocumentStore",
]


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

_TS_KEY = "$timestamp"


@dataclass(frozen=True)
class Filter:
    """A single store-side query constraint."""
    field: str
    op: str  # "==" or "array-contains"
    value: Any

    def matches(self, data: Dict[str, Any]) -> bool:
        current = data.get(self.field)
        if self.op == "==":
            return current == self.value
        if self.op == "array-contains":
            return isinstance(current, (list, tuple, set)) and self.value in current
        raise StoreError(f"unsupported filter operator {self.op!r}")


@dataclass
class Document:
    id: str
    path: str
    data: Dict[str, Any] = field(default_factory=dict)


class DocumentStore(Protocol):
    """Keyed, queryable, ordered-collection store used by the services."""

    async def get(self, path: str) -> Optional[Document]:
        ...

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        ...

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        ...

    async def query(
        self,
        collection_path: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        ...


def _split(path: str) -> List[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise StoreError("empty store path")
    return parts


class InMemoryDocumentStore:
    """Dictionary-backed :class:`DocumentStore` with optional JSON persistence."""

    def __init__(self, snapshot_path: Optional[str] = None):
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._docs: Dict[str, Dict[str, Any]] = self._load()
        self._last_ts: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self.snapshot_path is None or not self.snapshot_path.exists():
            return {}
        try:
            with open(self.snapshot_path, "r", encoding="utf-8") as f:
                return json.load(f, object_hook=_decode)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable store snapshot {self.snapshot_path}: {e}")
            return {}

    def _save(self) -> None:
        if self.snapshot_path is None:
            return
        try:
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.snapshot_path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._docs, f, indent=2, ensure_ascii=False, default=_encode)
            tmp_path.replace(self.snapshot_path)
        except OSError as e:
            raise StoreError(f"failed to persist store snapshot: {e}") from e

    def _now(self) -> datetime:
        ts = datetime.now(timezone.utc)
        if self._last_ts is not None and ts <= self._last_ts:
            ts = self._last_ts + timedelta(microseconds=1)
        self._last_ts = ts
        return ts

    def _resolve_sentinels(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = None
        resolved = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                if now is None:
                    now = self._now()
                value = now
            resolved[key] = value
        return resolved

    # ------------------------------------------------------------------
    # DocumentStore API
    # ------------------------------------------------------------------
    async def get(self, path: str) -> Optional[Document]:
        parts = _split(path)
        if len(parts) % 2:
            raise StoreError(f"{path!r} is a collection path, expected a document path")
        key = "/".join(parts)
        data = self._docs.get(key)
        if data is None:
            return None
        return Document(id=parts[-1], path=key, data=dict(data))

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        parts = _split(path)
        if len(parts) % 2:
            raise StoreError(f"{path!r} is a collection path, expected a document path")
        self._docs["/".join(parts)] = self._resolve_sentinels(data)
        self._save()

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        parts = _split(collection_path)
        if not len(parts) % 2:
            raise StoreError(f"{collection_path!r} is a document path, expected a collection path")
        doc_id = uuid.uuid4().hex[:20]
        self._docs["/".join(parts + [doc_id])] = self._resolve_sentinels(data)
        self._save()
        return doc_id

    async def query(
        self,
        collection_path: str,
        filters: Iterable[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        parts = _split(collection_path)
        if not len(parts) % 2:
            raise StoreError(f"{collection_path!r} is a document path, expected a collection path")
        prefix = "/".join(parts) + "/"
        filters = list(filters)
        results = []
        for key, data in self._docs.items():
            if not key.startswith(prefix) or "/" in key[len(prefix):]:
                continue
            if all(f.matches(data) for f in filters):
                results.append(Document(id=key[len(prefix):], path=key, data=dict(data)))
        if order_by is not None:
            # Documents without the field sort first, like a missing value would
            results.sort(key=lambda d: _sort_key(d.data.get(order_by)), reverse=descending)
        return results


def _sort_key(value: Any) -> Tuple[int, Any]:
    if value is None:
        return (0, 0)
    if isinstance(value, datetime):
        return (1, value.timestamp())
    return (2, value)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_TS_KEY: value.isoformat()}
    if isinstance(value, set):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _TS_KEY in obj:
        return datetime.fromisoformat(obj[_TS_KEY])
    return obj
