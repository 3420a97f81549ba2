"""Keyword filter and recency ordering for Strava activity payloads."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from .config import ACTIVITY_KEYWORD
from .models import Activity

__all__ = ["text_field", "matches_keyword", "filter_and_sort_activities"]


def text_field(activity: Mapping[str, Any], key: str) -> str:
    """Return ``activity[key]`` when it is a string, otherwise ``""``."""

    value = activity.get(key)
    return value if isinstance(value, str) else ""


def matches_keyword(activity: Mapping[str, Any], keyword: str = ACTIVITY_KEYWORD) -> bool:
    """Return ``True`` when the name or description contains ``keyword``.

    The comparison is case-insensitive. Missing or non-string fields never
    match and never raise.
    """

    needle = keyword.casefold()
    return (
        needle in text_field(activity, "name").casefold()
        or needle in text_field(activity, "description").casefold()
    )


def filter_and_sort_activities(
    activities: Iterable[Activity], keyword: str = ACTIVITY_KEYWORD
) -> List[Activity]:
    """Return matching activities, most recent ``start_date`` first.

    ``start_date`` is compared as a raw ISO-8601 string; activities without
    one sort last. Ties keep their input order.
    """

    filtered = [act for act in activities if matches_keyword(act, keyword)]
    # sorted() stays stable with reverse=True.
    return sorted(filtered, key=lambda act: text_field(act, "start_date"), reverse=True)
