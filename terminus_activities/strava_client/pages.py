"""Single-page fetch of the authenticated athlete's activities."""

from __future__ import annotations

import logging
import time
from typing import Callable, List

import requests

from ..config import (
    ACTIVITIES_AFTER,
    ACTIVITY_PAGE_SIZE,
    REQUEST_TIMEOUT,
    STRAVA_BASE_URL,
)
from ..errors import DecodeError, TransportError
from ..models import Activity, PageRequest
from .response_handling import extract_error
from .session import get_default_session

LOGGER = logging.getLogger(__name__)

ACTIVITIES_PATH = "/athlete/activities"


class ActivityPageFetcher:
    """Fetch one page of ``/athlete/activities`` and decode it.

    A single attempt is made per call. Transport problems and error statuses
    raise :class:`TransportError`; bodies that cannot be decompressed or are
    not a JSON list of objects raise :class:`DecodeError`.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = STRAVA_BASE_URL,
        page_size: int = ACTIVITY_PAGE_SIZE,
        after: int = ACTIVITIES_AFTER,
        timeout: float = REQUEST_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._session = session or get_default_session()
        self._url = base_url.rstrip("/") + ACTIVITIES_PATH
        self.page_size = page_size
        self._after = after
        self._timeout = timeout
        self._clock = clock

    def build_request(self, token: str, page: int) -> PageRequest:
        if page < 1:
            raise ValueError("page must be >= 1")
        return PageRequest(
            token=token,
            page=page,
            per_page=self.page_size,
            after=self._after,
            before=int(self._clock()),
        )

    def fetch(self, token: str, page: int) -> List[Activity]:
        request = self.build_request(token, page)
        try:
            resp = self._session.get(
                self._url,
                headers={"Authorization": f"Bearer {token}"},
                params=request.params(),
                timeout=self._timeout,
            )
        except requests.exceptions.ContentDecodingError as exc:
            LOGGER.warning("Activities page=%s body could not be decompressed: %s", page, exc)
            raise DecodeError(f"Activities page {page}: undecodable body") from exc
        except requests.RequestException as exc:
            LOGGER.warning(
                "Activities page=%s network error err=%s", page, exc.__class__.__name__
            )
            raise TransportError(f"Activities page {page}: {exc}") from exc

        if resp.status_code >= 400:
            detail = extract_error(resp)
            message = f"Activities page {page} request failed (status {resp.status_code})"
            if detail:
                message = f"{message} | {detail}"
            LOGGER.warning(message)
            raise TransportError(message, status_code=resp.status_code)

        return self._decode(resp, page)

    def _decode(self, resp: requests.Response, page: int) -> List[Activity]:
        try:
            data = resp.json()
        except requests.exceptions.ContentDecodingError as exc:
            LOGGER.warning("Activities page=%s body could not be decompressed: %s", page, exc)
            raise DecodeError(f"Activities page {page}: undecodable body") from exc
        except ValueError as exc:
            LOGGER.warning("Non-JSON response for activities page=%s", page)
            raise DecodeError(f"Activities page {page}: invalid JSON") from exc

        if not isinstance(data, list):
            LOGGER.warning(
                "Unexpected JSON shape (not list) for activities page=%s type=%s",
                page,
                type(data).__name__,
            )
            raise DecodeError(
                f"Activities page {page}: expected a list, got {type(data).__name__}"
            )
        if not all(isinstance(item, dict) for item in data):
            raise DecodeError(f"Activities page {page}: list contains non-object entries")
        LOGGER.debug("Activities page=%s entries=%s", page, len(data))
        return data
