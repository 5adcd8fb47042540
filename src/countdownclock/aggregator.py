"""Merges arrivals for one platform across every feed that serves it."""

import logging
import math
import time
from typing import Dict, List, Optional

from .config import FEED_URLS
from .feed_client import FeedClient
from .models import ArrivalEvent, FeedMessage, LineGroup, ReportEntry, RunContext, Station

logger = logging.getLogger(__name__)


def minutes_until(epoch_seconds: float, now: float) -> int:
    """Whole minutes from ``now`` to ``epoch_seconds``, rounding halves up."""
    return int(math.floor((epoch_seconds - now) / 60 + 0.5))


def extract_events(feed: FeedMessage, platform_key: str) -> List[ArrivalEvent]:
    """Collect every predicted arrival at ``platform_key`` in one feed."""
    events = []
    for trip_update in feed.trip_updates():
        for stop_time_update in trip_update.stop_time_updates:
            if stop_time_update.stop_id != platform_key or stop_time_update.arrival_time is None:
                continue
            events.append(ArrivalEvent(stop_time_update.arrival_time, trip_update.route_id))
    return events


def build_report(events: List[ArrivalEvent], now: float) -> List[ReportEntry]:
    """Turn arrival events into an ordered minutes-remaining report.

    Events at or before ``now`` are dropped.
    """
    return [
        ReportEntry(minutes_until(event.epoch_seconds, now), event.route_id)
        for event in sorted(events)
        if event.epoch_seconds > now
    ]


class ArrivalAggregator:
    """Queries each line group's feed and reduces the matches into a report."""

    def __init__(self, feed_client: FeedClient, feed_urls: Optional[Dict[LineGroup, str]] = None):
        self.feed_client = feed_client
        self.feed_urls = feed_urls or FEED_URLS

    def collect_events(self, station: Station) -> List[ArrivalEvent]:
        """
        Fetch every feed serving the station and return its arrivals sorted by time.

        Any fetch failure propagates; no partial result is returned.
        """
        events: List[ArrivalEvent] = []
        for group in station.line_groups:
            feed = self.feed_client.fetch(self.feed_urls[group])
            group_events = extract_events(feed, station.platform_key)
            logger.debug(f"{len(group_events)} arrivals at {station.platform_key} in the {group.value} feed")
            events.extend(group_events)
        return sorted(events)

    def aggregate(
        self,
        station: Station,
        now: Optional[float] = None,
        context: Optional[RunContext] = None,
    ) -> List[ReportEntry]:
        """
        Build the countdown report for a station.

        Args:
            station: Resolved station.
            now: Unix time to count down from. Defaults to the current time.
            context: Optional run context that records events and report.

        Returns:
            Report entries ordered by arrival time; may be empty.
        """
        events = self.collect_events(station)
        if now is None:
            now = time.time()
        report = build_report(events, now)
        logger.info(f"{len(report)} upcoming trains at {station.name} ({station.platform_key})")

        if context is not None:
            context.station = station
            context.events = events
            context.report = report
        return report
