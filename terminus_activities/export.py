"""Write the filtered activity list to a static JSON file.

Meant for scheduled jobs that publish a static site: a refresh token from
the environment is exchanged for an access token, the pages are fetched once
and the matching activities are written newest first.

Usage:
    python -m terminus_activities.export --output static/activities.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import List

from .auth import TokenError, get_access_token
from .config import ACTIVITY_KEYWORD, EXPORT_OUTPUT_FILE, REFRESH_TOKEN
from .errors import UpstreamError
from .models import Activity
from .service import fetch_filtered_activities
from .strava_client import ActivityAggregator


def export_activities(
    output_path: str,
    *,
    refresh_token: str = REFRESH_TOKEN,
    aggregator: ActivityAggregator | None = None,
    keyword: str = ACTIVITY_KEYWORD,
) -> List[Activity]:
    """Fetch, filter and write activities to ``output_path``; return them."""

    access_token, _ = get_access_token(refresh_token)
    logging.info("Fetching activities from Strava API ...")
    activities = fetch_filtered_activities(
        aggregator or ActivityAggregator(), access_token, keyword
    )
    logging.info("Filtered to %d activities with %r keyword", len(activities), keyword)

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(activities, fh, indent=2)
    logging.info("Activities saved to %s", output_path)
    return activities


def _parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export filtered Strava activities")
    parser.add_argument(
        "--output",
        default=EXPORT_OUTPUT_FILE,
        help="Destination JSON file (default: %(default)s)",
    )
    parser.add_argument(
        "--keyword",
        default=ACTIVITY_KEYWORD,
        help="Case-insensitive keyword matched in name/description",
    )
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    """Entry point when executing ``python -m terminus_activities.export``."""

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )
    args = _parse_args(argv)
    try:
        export_activities(args.output, keyword=args.keyword)
    except (TokenError, UpstreamError) as exc:
        logging.error("Export failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI helper
    raise SystemExit(main())
