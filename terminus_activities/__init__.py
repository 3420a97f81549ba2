"""Terminus activities service package."""

from .cache import ActivityCache
from .errors import AuthError, DecodeError, StravaAPIError, TransportError, UpstreamError
from .filtering import filter_and_sort_activities
from .service import ActivitiesService
from .sessions import TokenStore

__all__ = [
    "ActivitiesService",
    "ActivityCache",
    "TokenStore",
    "filter_and_sort_activities",
    "AuthError",
    "StravaAPIError",
    "TransportError",
    "DecodeError",
    "UpstreamError",
]
