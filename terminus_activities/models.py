from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, TypeAlias

Activity: TypeAlias = Dict[str, Any]


@dataclass(frozen=True)
class PageRequest:
    token: str
    page: int
    per_page: int
    after: int
    before: int

    def params(self) -> Dict[str, int]:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "after": self.after,
            "before": self.before,
        }


@dataclass(frozen=True)
class CacheEntry:
    user_id: str
    activities: Tuple[Activity, ...]
    fetched_at: float

    def is_fresh(self, now: float, window_seconds: float) -> bool:
        return now - self.fetched_at < window_seconds


@dataclass
class AggregateResult:
    activities: List[Activity] = field(default_factory=list)
    pages_requested: int = 0
    pages_with_data: int = 0
    # Last page in the fan-out came back full, so older activities may exist.
    truncated: bool = False
