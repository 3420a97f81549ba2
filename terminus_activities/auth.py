"""OAuth token utilities for the Strava API.

Two grants are supported: exchanging the authorization code delivered to the
web callback, and refreshing an access token from a long-lived refresh token
(used by the static export job). Logging never includes full tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

from .config import CLIENT_ID, CLIENT_SECRET, REQUEST_TIMEOUT, STRAVA_OAUTH_URL
from .strava_client.response_handling import extract_error
from .strava_client.session import create_default_session

LOGGER = logging.getLogger(__name__)

_session = create_default_session()


class TokenError(Exception):
    """Raised when the token endpoint cannot be reached or rejects the grant."""


class TokenResponseError(TokenError):
    """Raised when the token endpoint answers with an unusable payload."""


@dataclass(frozen=True)
class TokenGrant:
    athlete_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


def _mask_tail(value: str | None, visible: int = 4) -> str:
    if not value:
        return ""
    tail = value[-visible:]
    return f"****{tail}" if len(value) > visible else "****" + tail


def _require_credentials() -> None:
    if not CLIENT_ID or not CLIENT_SECRET:
        raise TokenError(
            "Client credentials not configured (CLIENT_ID / CLIENT_SECRET missing)"
        )


def _post_token_request(payload: Dict[str, Any], action: str) -> Dict[str, Any]:
    LOGGER.debug("Token endpoint: %s", STRAVA_OAUTH_URL)
    LOGGER.debug({"client_id": CLIENT_ID, "grant_type": payload["grant_type"]})
    try:
        resp = _session.post(STRAVA_OAUTH_URL, data=payload, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        LOGGER.error("Token request transport error: %s", e)
        raise TokenError(f"Transport failure during {action}") from e

    status = resp.status_code
    LOGGER.debug("Token endpoint status=%s", status)
    if status >= 400:
        detail = extract_error(resp)
        LOGGER.error(
            "%s failed status=%s%s",
            action.capitalize(),
            status,
            f" detail={detail}" if detail else "",
        )
        raise TokenError(f"{action.capitalize()} failed with status {status}")

    try:
        data = resp.json()
    except ValueError as e:
        LOGGER.error("Invalid JSON in token response: %s", e)
        raise TokenResponseError("Invalid JSON in token response") from e

    if not isinstance(data, dict):
        LOGGER.error("Unexpected token response shape: %s", type(data).__name__)
        raise TokenResponseError("Unexpected token response shape")
    if not data.get("access_token"):
        LOGGER.error("No access_token in token response")
        raise TokenResponseError("No access_token in response")
    return data


def exchange_authorization_code(code: str) -> TokenGrant:
    """Exchange an OAuth authorization ``code`` for the athlete's tokens.

    Raises:
        TokenError: If the request fails or the endpoint rejects the code.
        TokenResponseError: If the response lacks a token or athlete id.
    """
    _require_credentials()
    if not code:
        raise TokenError("Missing authorization code")

    LOGGER.info("Exchanging authorization code=%s", _mask_tail(code))
    data = _post_token_request(
        {
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "code": code,
            "grant_type": "authorization_code",
        },
        "code exchange",
    )
    athlete = data.get("athlete")
    athlete_id = athlete.get("id") if isinstance(athlete, dict) else None
    if athlete_id is None:
        LOGGER.error("Token response missing athlete id")
        raise TokenResponseError("No athlete id in response")

    grant = TokenGrant(
        athlete_id=str(athlete_id),
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        expires_at=data.get("expires_at"),
    )
    LOGGER.info(
        "Code exchange succeeded athlete=%s access_token=%s",
        grant.athlete_id,
        _mask_tail(grant.access_token),
    )
    return grant


def get_access_token(refresh_token: str) -> Tuple[str, str | None]:
    """Exchange a refresh token for a new access (and possibly new refresh) token.

    Returns:
        (access_token, refresh_token) tuple; the refresh token may be None.

    Raises:
        TokenError: If the HTTP request fails or JSON is invalid / lacks tokens.
    """
    _require_credentials()
    if not refresh_token:
        raise TokenError("Missing refresh token")

    LOGGER.info("Refreshing Strava token refresh_token=%s", _mask_tail(refresh_token))
    data = _post_token_request(
        {
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        },
        "token refresh",
    )
    access_token = data["access_token"]
    new_refresh_token = data.get("refresh_token")
    LOGGER.info(
        "Token refresh access_token_len=%s refresh_token_changed=%s",
        len(access_token),
        bool(new_refresh_token and new_refresh_token != refresh_token),
    )
    return access_token, new_refresh_token
