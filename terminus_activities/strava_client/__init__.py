"""Strava client components (session, page fetcher, parallel aggregator)."""

from .aggregator import ActivityAggregator  # noqa: F401
from .pages import ActivityPageFetcher  # noqa: F401
from .session import create_default_session, get_default_session  # noqa: F401
