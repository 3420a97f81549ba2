"""Activities service (application layer).

Resolves the caller's token, serves the per-user cache and, on a miss, runs
the parallel fetch followed by the keyword filter. Web handlers and the CLI
depend on this API rather than wiring the pieces themselves.
"""

from __future__ import annotations

import copy
import logging
import time
from typing import List, Optional

from .cache import ActivityCache
from .config import ACTIVITY_KEYWORD
from .errors import AuthError, StravaAPIError, UpstreamError
from .filtering import filter_and_sort_activities
from .models import Activity
from .sessions import TokenStore
from .strava_client import ActivityAggregator

LOGGER = logging.getLogger(__name__)


class ActivitiesService:
    def __init__(
        self,
        *,
        tokens: TokenStore | None = None,
        cache: ActivityCache | None = None,
        aggregator: ActivityAggregator | None = None,
        keyword: str = ACTIVITY_KEYWORD,
    ) -> None:
        self.tokens = tokens if tokens is not None else TokenStore()
        self.cache = cache if cache is not None else ActivityCache()
        self.aggregator = aggregator if aggregator is not None else ActivityAggregator()
        self.keyword = keyword
        self._log = logging.getLogger(self.__class__.__name__)

    def get_activities(self, user_id: Optional[str]) -> List[Activity]:
        """Return the filtered, newest-first activities for ``user_id``.

        Raises:
            AuthError: ``user_id`` is empty or has no stored token.
            UpstreamError: the Strava fetch failed; nothing is cached.
        """

        started = time.perf_counter()
        if not user_id:
            raise AuthError("Not authenticated")
        token = self.tokens.get(user_id)
        if not token:
            raise AuthError("Token not found")

        entry = self.cache.read(user_id)
        if entry is not None:
            self._log.info(
                "Activities for user=%s served from cache in %.3fs",
                user_id,
                time.perf_counter() - started,
            )
            return copy.deepcopy(list(entry.activities))

        activities = self.refresh(user_id, token)
        self._log.info(
            "Activities for user=%s fetched in %.3fs (%d matching)",
            user_id,
            time.perf_counter() - started,
            len(activities),
        )
        return activities

    def refresh(self, user_id: str, token: str) -> List[Activity]:
        """Fetch, filter and cache activities, bypassing any cached entry."""

        filtered = fetch_filtered_activities(self.aggregator, token, self.keyword)
        self.cache.write(user_id, filtered)
        return filtered


def fetch_filtered_activities(
    aggregator: ActivityAggregator, token: str, keyword: str = ACTIVITY_KEYWORD
) -> List[Activity]:
    """Run the page fan-out and keyword filter once.

    Any Strava failure is re-raised as :class:`UpstreamError`.
    """

    try:
        result = aggregator.fetch_all(token)
    except UpstreamError:
        raise
    except StravaAPIError as exc:
        raise UpstreamError("Failed to fetch activities") from exc
    filtered = filter_and_sort_activities(result.activities, keyword)
    LOGGER.debug(
        "Filtered %d of %d activities with keyword=%r",
        len(filtered),
        len(result.activities),
        keyword,
    )
    return filtered
