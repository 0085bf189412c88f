from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")


def total_pages_for(total: int, limit: int) -> int:
    if limit <= 0:
        return 1
    return max(1, math.ceil(total / limit))


def clamp_page(value: Any) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


@dataclass
class Page(Generic[T]):
    """One page of a backend collection (``{items, meta}``)."""

    items: List[T] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total_pages: int = 1
    total: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any, *, page: int = 1, limit: int = 10) -> "Page[Any]":
        if isinstance(payload, list):
            items, meta = payload, {}
        elif isinstance(payload, dict):
            items = payload.get("items")
            if items is None:
                items = payload.get("data") or []
            meta = payload.get("meta") or {}
        else:
            items, meta = [], {}
        raw = list(items)
        current = clamp_page(meta.get("page", page))

        total = meta.get("total")
        pages = meta.get("totalPages", meta.get("total_pages"))
        if not pages and not isinstance(total, int):
            # meta нет: пришёл весь список, режем страницу сами
            total = len(raw)
            pages = total_pages_for(total, limit)
            current = min(current, pages)
            start = (current - 1) * limit
            items = raw[start:start + limit] if limit > 0 else raw
        else:
            if not pages:
                pages = total_pages_for(total, limit)
            items = raw[:limit] if limit > 0 else raw
        return cls(
            items=items,
            page=current,
            limit=limit,
            total_pages=max(1, int(pages)),
            total=total if isinstance(total, int) else None,
        )

    def map(self, fn: Callable[[Any], Any]) -> "Page[Any]":
        return Page(
            items=[fn(i) for i in self.items],
            page=self.page,
            limit=self.limit,
            total_pages=self.total_pages,
            total=self.total,
        )

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def count(self) -> int:
        return self.total if self.total is not None else len(self.items)
