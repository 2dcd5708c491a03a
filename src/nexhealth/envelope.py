"""Normalization of NexHealth response envelopes.

NexHealth wraps every payload in an envelope, but not always the same way:

    {"data": {"patients": [...]}, "count": 42}    # nested under the plural
    {"data": [...], "count": 3}                   # bare list under data
    {"data": {"patient": {...}}}                  # nested single record
    {"data": {...}}                               # bare record under data

Older and newer API versions of the same endpoint (charges and payments in
particular) disagree, so every accessor goes through the helpers below. The
lookup order is fixed: ``data.<key>``, then ``data`` itself, then empty.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def _data(payload: Any) -> Any:
    if isinstance(payload, Mapping):
        return payload.get("data")
    return None


def extract_list(payload: Any, key: str) -> list[Any]:
    """Return the list stored at ``data.<key>``, else ``data``, else ``[]``.

    A present-but-empty ``data.<key>`` list wins over the fallback.
    """
    data = _data(payload)
    if isinstance(data, Mapping):
        nested = data.get(key)
        if isinstance(nested, list):
            return nested
    if isinstance(data, list):
        return data
    return []


def extract_record(payload: Any, key: str) -> dict[str, Any] | None:
    """Return the mapping at ``data.<key>``, else ``data``, else None."""
    data = _data(payload)
    if not isinstance(data, Mapping):
        return None
    nested = data.get(key)
    if isinstance(nested, Mapping):
        return dict(nested)
    if data:
        return dict(data)
    return None


def extract_count(payload: Any, fallback: int = 0) -> int:
    """Return the envelope's total ``count``, or ``fallback`` if absent."""
    if isinstance(payload, Mapping):
        count = payload.get("count")
        if isinstance(count, int) and not isinstance(count, bool) and count:
            return count
    return fallback


class Page(list):
    """Records from one list response plus the envelope's total.

    ``total`` is the envelope ``count`` when it is a positive integer,
    otherwise the number of records on the page.
    """

    def __init__(self, records: Iterable[Any] = (), total: int = 0) -> None:
        super().__init__(records)
        self.total = total or len(self)

    @classmethod
    def from_payload(cls, payload: Any, records: Iterable[Any]) -> Page:
        page = cls(records)
        page.total = extract_count(payload, len(page))
        return page
