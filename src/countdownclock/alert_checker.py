"""Explains an empty countdown from the subway service alert feed."""

import logging
from typing import List, Optional

from .config import ALERTS_URL, LINE_GROUP_CODES
from .exceptions import Unexplained
from .feed_client import FeedClient
from .models import Alert, RunContext, Station

logger = logging.getLogger(__name__)


class AlertChecker:
    """Searches service alerts for text accounting for missing arrivals."""

    def __init__(self, feed_client: FeedClient, alerts_url: str = ALERTS_URL):
        self.feed_client = feed_client
        self.alerts_url = alerts_url

    def explain_absence(self, station: Station, context: Optional[RunContext] = None) -> str:
        """
        Find alert text explaining why no trains are due at a station.

        Args:
            station: Station with an empty countdown report.
            context: Optional run context; receives the accumulated alert text
                     and is included in the diagnostic on failure.

        Returns:
            Alert text mentioning the station.

        Raises:
            Unexplained: If no alert text mentions the station.
        """
        feed = self.feed_client.fetch(self.alerts_url)
        alerts = feed.alerts()
        logger.debug(f"Checking {len(alerts)} alerts for {station.stop_code}")

        # Alerts scoped to the stop itself
        explanation = ""
        for alert in alerts:
            if any(e.stop_id == station.stop_code for e in alert.informed_entities):
                explanation += alert.description

        # Alerts scoped to a route that serves the stop only count if they name the station
        for text in self._route_alert_texts(alerts, station):
            if station.name in text and text not in explanation:
                explanation += text

        if context is None:
            context = RunContext()
        if context.station is None:
            context.station = station
        context.alert_text = explanation

        if station.name in explanation:
            logger.info(f"Found alert explaining missing trains at {station.name}")
            return explanation

        logger.error(f"No alert explains the missing trains at {station.name}")
        raise Unexplained(context.diagnostics())

    @staticmethod
    def _route_alert_texts(alerts: List[Alert], station: Station) -> List[str]:
        codes = set()
        for group in station.line_groups:
            codes.update(LINE_GROUP_CODES[group])

        staged = []
        for alert in alerts:
            for informed in alert.informed_entities:
                if informed.route_id and informed.route_id.lower() in codes:
                    staged.extend(alert.descriptions)
        return staged
