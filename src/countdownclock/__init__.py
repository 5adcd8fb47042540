"""Countdown Clock - next-train countdowns for MTA subway platforms."""

__version__ = "0.1.0"

from .models import Station, Direction, LineGroup, ArrivalEvent, ReportEntry, Countdown
from .exceptions import (
    CountdownError,
    InvalidInput,
    StationNotFound,
    AuthError,
    FeedUnavailable,
    DecodeError,
    Unexplained,
)
from .station_resolver import StationResolver
from .feed_client import FeedClient
from .aggregator import ArrivalAggregator
from .alert_checker import AlertChecker
from .tracker import CountdownClock

__all__ = [
    "CountdownClock",
    "StationResolver",
    "FeedClient",
    "ArrivalAggregator",
    "AlertChecker",
    "Station",
    "Direction",
    "LineGroup",
    "ArrivalEvent",
    "ReportEntry",
    "Countdown",
    "CountdownError",
    "InvalidInput",
    "StationNotFound",
    "AuthError",
    "FeedUnavailable",
    "DecodeError",
    "Unexplained",
]
