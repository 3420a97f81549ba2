"""Flask application exposing login, OAuth callback and the activities feed."""

from __future__ import annotations

import logging
import urllib.parse

from flask import Flask, Response, jsonify, redirect, request, send_from_directory
from flask.typing import ResponseReturnValue

from .auth import TokenError, TokenResponseError, exchange_authorization_code
from .config import (
    CLIENT_ID,
    OAUTH_SCOPE,
    REDIRECT_URI,
    SESSION_COOKIE_NAME,
    STATIC_DIR,
    STRAVA_AUTHORIZE_URL,
)
from .errors import AuthError, UpstreamError
from .service import ActivitiesService

LOGGER = logging.getLogger(__name__)

SERVICE_EXTENSION = "activities_service"


def _plain(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


def build_authorize_url() -> str:
    params = {
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": OAUTH_SCOPE,
    }
    return f"{STRAVA_AUTHORIZE_URL}?{urllib.parse.urlencode(params)}"


def create_app(
    service: ActivitiesService | None = None, static_dir: str = STATIC_DIR
) -> Flask:
    """Build the web app around ``service`` (a fresh one when omitted)."""

    app = Flask(__name__, static_folder=static_dir, static_url_path="/static")
    # Keep Strava's key order in activity payloads.
    app.json.sort_keys = False  # type: ignore[attr-defined]
    activities_service = service or ActivitiesService()
    app.extensions[SERVICE_EXTENSION] = activities_service

    @app.errorhandler(AuthError)
    def _auth_error(exc: AuthError) -> ResponseReturnValue:
        LOGGER.info("Rejected activities request: %s", exc)
        return _plain(str(exc), 401)

    @app.errorhandler(UpstreamError)
    def _upstream_error(exc: UpstreamError) -> ResponseReturnValue:
        LOGGER.error("Activities fetch failed: %s", exc)
        return _plain("Failed to fetch activities", 500)

    @app.route("/")
    def index() -> ResponseReturnValue:
        return send_from_directory(static_dir, "index.html")

    @app.route("/login")
    def login() -> ResponseReturnValue:
        return redirect(build_authorize_url(), code=302)

    @app.route("/oauth/callback")
    def oauth_callback() -> ResponseReturnValue:
        code = request.args.get("code")
        if not code:
            return _plain("Missing code", 400)
        try:
            grant = exchange_authorization_code(code)
        except TokenResponseError:
            return _plain("Invalid token response", 500)
        except TokenError:
            return _plain("Token exchange failed", 500)

        activities_service.tokens.set(grant.athlete_id, grant.access_token)
        LOGGER.info("Athlete %s logged in", grant.athlete_id)
        response = redirect("/", code=302)
        response.set_cookie(
            SESSION_COOKIE_NAME, grant.athlete_id, path="/", samesite="Lax"
        )
        return response

    @app.route("/activities")
    def activities() -> ResponseReturnValue:
        user_id = request.cookies.get(SESSION_COOKIE_NAME)
        return jsonify(activities_service.get_activities(user_id))

    return app
