"""Global pytest fixtures & helpers.

Adds project root to path and provides fakes shared by the fetch, cache and
web tests so no test touches the network.
"""
from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from terminus_activities.cache import ActivityCache
from terminus_activities.errors import TransportError
from terminus_activities.models import AggregateResult
from terminus_activities.service import ActivitiesService
from terminus_activities.sessions import TokenStore


# --- Factory helpers -------------------------------------------------
def make_activity(name=None, start_date=None, description=None, **extra):
    activity = dict(extra)
    if name is not None:
        activity["name"] = name
    if description is not None:
        activity["description"] = description
    if start_date is not None:
        activity["start_date"] = start_date
    return activity


class FakeClock:
    def __init__(self, now=1_750_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeAggregator:
    """Stands in for ActivityAggregator; records tokens it was called with."""

    def __init__(self, activities=None, error=None):
        self.activities = activities or []
        self.error = error
        self.calls = []

    def fetch_all(self, token):
        self.calls.append(token)
        if self.error is not None:
            raise self.error
        return AggregateResult(
            activities=list(self.activities),
            pages_requested=10,
            pages_with_data=1 if self.activities else 0,
        )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ActivityCache(ttl_seconds=600, clock=clock)


@pytest.fixture
def tokens():
    store = TokenStore()
    for user_id in ("123", "456", "789"):
        store.set(user_id, "dummy-token")
    return store


@pytest.fixture
def aggregator():
    return FakeAggregator(
        activities=[
            make_activity("API Ride to Terminus", "2025-06-16T10:00:00Z"),
            make_activity("Commute", "2025-06-17T08:00:00Z"),
        ]
    )


@pytest.fixture
def failing_aggregator():
    return FakeAggregator(error=TransportError("API error", status_code=503))


@pytest.fixture
def service(tokens, cache, aggregator):
    return ActivitiesService(tokens=tokens, cache=cache, aggregator=aggregator)


@pytest.fixture
def terminus_rides():
    return [
        make_activity("Ride to Terminus", "2025-06-14T10:00:00Z", description=""),
        make_activity("Morning Ride", "2025-06-15T09:00:00Z", description="Terminus hill"),
        make_activity("Evening Ride", "2025-06-13T18:00:00Z", description=""),
    ]
