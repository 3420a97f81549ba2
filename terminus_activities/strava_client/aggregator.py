"""Parallel fan-out over a fixed number of activity pages."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from ..config import ACTIVITY_MAX_PAGES
from ..errors import UpstreamError
from ..models import Activity, AggregateResult
from .pages import ActivityPageFetcher


class ActivityAggregator:
    """Fetch pages ``1..max_pages`` concurrently and merge them.

    Every page request runs to completion; a failure in one page does not
    cancel its siblings. If any page failed the merged data is discarded and
    :class:`UpstreamError` is raised from the first failure observed.
    """

    def __init__(
        self,
        fetcher: ActivityPageFetcher | None = None,
        max_pages: int = ACTIVITY_MAX_PAGES,
    ) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self._fetcher = fetcher or ActivityPageFetcher()
        self.max_pages = max_pages
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch_all(self, token: str) -> AggregateResult:
        pages: Dict[int, List[Activity]] = {}
        first_error: Optional[BaseException] = None
        failed = 0

        with ThreadPoolExecutor(
            max_workers=self.max_pages, thread_name_prefix="activities-page"
        ) as executor:
            future_to_page: Dict[Future, int] = {
                executor.submit(self._fetcher.fetch, token, page): page
                for page in range(1, self.max_pages + 1)
            }
            for fut in as_completed(future_to_page):
                page = future_to_page[fut]
                try:
                    activities = fut.result()
                except Exception as exc:  # noqa: BLE001
                    failed += 1
                    if first_error is None:
                        first_error = exc
                    self._log.debug("Page %s failed: %s", page, exc)
                    continue
                if activities:
                    pages[page] = activities

        if first_error is not None:
            self._log.error(
                "Activity fetch failed on %d/%d pages; discarding partial results: %s",
                failed,
                self.max_pages,
                first_error,
            )
            raise UpstreamError(
                f"{failed} of {self.max_pages} activity pages failed"
            ) from first_error

        merged: List[Activity] = []
        for page in sorted(pages):
            merged.extend(pages[page])

        last_page = pages.get(self.max_pages, [])
        truncated = len(last_page) >= self._fetcher.page_size
        if truncated:
            self._log.warning(
                "Page %d came back full (%d entries); older activities beyond "
                "%d records were not fetched",
                self.max_pages,
                len(last_page),
                self.max_pages * self._fetcher.page_size,
            )
        self._log.info(
            "Fetched %d activities from %d non-empty pages", len(merged), len(pages)
        )
        return AggregateResult(
            activities=merged,
            pages_requested=self.max_pages,
            pages_with_data=len(pages),
            truncated=truncated,
        )
