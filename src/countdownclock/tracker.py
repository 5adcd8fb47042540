"""Main countdown clock class."""

import logging
from datetime import datetime
from typing import Optional

from .aggregator import ArrivalAggregator
from .alert_checker import AlertChecker
from .config import Settings
from .exceptions import InvalidInput
from .feed_client import FeedClient
from .models import Countdown, RunContext, Station
from .station_resolver import StationResolver
from .storage import LocalStore

logger = logging.getLogger(__name__)


class CountdownClock:
    """
    Answers "when is the next train at this platform?".

    This class wires together:
    - station resolution (with the station cached from a previous run)
    - arrival aggregation across every feed serving the station
    - the service alert fallback when no trains are due
    """

    def __init__(
        self,
        api_key: str,
        settings: Optional[Settings] = None,
        resolver: Optional[StationResolver] = None,
        feed_client: Optional[FeedClient] = None,
        store: Optional[LocalStore] = None,
    ):
        """
        Initialize the clock.

        Args:
            api_key: MTA API key.
            settings: Runtime settings. Defaults to Settings.from_env().
            resolver: Station resolver. The station list is downloaded on first
                      use if the resolver has none loaded.
            feed_client: Feed client. Built from settings if omitted.
            store: Local store for the cached station and report snapshot.
                   Pass None to keep nothing on disk.
        """
        self.settings = settings or Settings.from_env()
        self.resolver = resolver or StationResolver()
        self.feed_client = feed_client or FeedClient(
            api_key,
            timeout=self.settings.timeout,
            attempts=self.settings.attempts,
            retry_delay=self.settings.retry_delay,
        )
        self.store = store
        self.aggregator = ArrivalAggregator(self.feed_client)
        self.alert_checker = AlertChecker(self.feed_client)
        self.context = RunContext()

    def get_station(self, stop_code: Optional[str] = None, direction=None) -> Station:
        """
        Get the station to count down for.

        With no stop code, reuse the station saved by a previous run. A saved
        station matching the requested stop and direction is reused as well.

        Raises:
            InvalidInput: If no stop code is given and none is cached, or the
                stop code or direction is malformed.
            StationNotFound: If the stop code is not in the station list.
        """
        cached = self.store.load_station() if self.store else None

        if stop_code is None:
            if cached is None:
                raise InvalidInput(
                    "You are missing a valid Stop ID (e.g. A27) or direction (e.g. S). "
                    "The correct format is: {command} {GTFS Stop ID} {Direction}"
                )
            logger.debug(f"Using cached station {cached.platform_key}")
            return cached

        # Malformed input fails before the station list is downloaded
        normalized_code, parsed_direction = StationResolver.validate(stop_code, direction)

        if cached is not None and cached.stop_code == normalized_code and cached.direction == parsed_direction:
            logger.debug(f"Using cached station {cached.platform_key}")
            return cached

        if self.resolver.stations is None:
            self.resolver.load_from_url(self.settings.stations_url)
        return self.resolver.resolve(stop_code, direction)

    def get_countdown(
        self,
        stop_code: Optional[str] = None,
        direction=None,
        now: Optional[float] = None,
        save: bool = True,
    ) -> Countdown:
        """
        Get the countdown for a platform.

        Args:
            stop_code: GTFS stop ID (e.g., "A27"). None reuses the cached station.
            direction: "N" or "S".
            now: Unix time to count down from. Defaults to the current time.
            save: Cache the station and write the report snapshot.

        Returns:
            Countdown with either a non-empty report or an alert explanation.

        Raises:
            Unexplained: If no trains are due and no alert explains why.
        """
        self.context = RunContext()
        station = self.get_station(stop_code, direction)
        self.context.station = station
        if save and self.store:
            self.store.save_station(station)

        report = self.aggregator.aggregate(station, now=now, context=self.context)

        explanation = None
        if report:
            if save and self.store:
                self.store.save_report(report)
        else:
            explanation = self.alert_checker.explain_absence(station, context=self.context)

        return Countdown(
            station=station,
            report=report,
            explanation=explanation,
            last_updated=datetime.now(),
        )

    def cleanup(self) -> None:
        """Release the HTTP session."""
        self.feed_client.close()
        logger.info("Cleaned up countdown clock resources")
