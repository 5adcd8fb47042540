"""MTA GTFS-Realtime fetcher and decoder."""

import logging
import re
import time
from typing import Callable, List, Optional

import requests
from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.transit import gtfs_realtime_pb2

from .exceptions import AuthError, DecodeError, FeedUnavailable
from .models import (
    Alert,
    FeedEntity,
    FeedMessage,
    InformedEntity,
    StopTimeUpdate,
    TripUpdate,
)
from .retry import Status, call_with_retry

logger = logging.getLogger(__name__)

# The MTA API gateway answers a bad key with this JSON body
FORBIDDEN_BODY = re.compile(rb'"message"\s*:\s*"Forbidden"')


class FeedClient:
    """Fetches GTFS-Realtime feeds with a fixed retry policy."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 2.0,
        attempts: int = 3,
        retry_delay: float = 5.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the feed client.

        Args:
            api_key: MTA API key, sent as the x-api-key header.
            timeout: Seconds allowed for each attempt.
            attempts: Total attempts per feed (initial + retries).
            retry_delay: Seconds to wait between attempts.
            session: Optional requests session to reuse.
            sleep: Sleep function used between attempts.
        """
        self.api_key = api_key
        self.timeout = timeout
        self.attempts = attempts
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.session = session or requests.Session()
        self.session.headers.update({"x-api-key": api_key})

    def __enter__(self) -> "FeedClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def fetch(self, endpoint: str) -> FeedMessage:
        """
        Fetch and decode one feed.

        Raises:
            AuthError: The endpoint rejected the API key (never retried).
            FeedUnavailable: Every attempt failed with a network error or timeout.
            DecodeError: The body is not a valid feed message.
        """
        return self.decode(self.fetch_raw(endpoint))

    def fetch_raw(self, endpoint: str) -> bytes:
        """Fetch the raw protobuf bytes for a feed under the retry policy."""
        outcome = call_with_retry(
            lambda: self._get(endpoint),
            attempts=self.attempts,
            delay=self.retry_delay,
            sleep=self._sleep,
        )
        if outcome.status is Status.FATAL:
            raise outcome.error
        if outcome.status is Status.TRANSIENT:
            logger.error(f"Giving up on {endpoint} after {outcome.attempts} attempts")
            raise FeedUnavailable(endpoint, outcome.error, outcome.attempts) from outcome.error
        return outcome.value

    def _get(self, endpoint: str) -> bytes:
        """Single attempt: GET the feed and check for an authorization failure."""
        logger.debug(f"Fetching {endpoint}")
        response = self.session.get(endpoint, timeout=self.timeout)
        body = response.content or b""
        if response.status_code in (401, 403) or FORBIDDEN_BODY.search(body):
            logger.error(f"Authorization error fetching {endpoint}")
            raise AuthError(self.api_key, body.decode("utf-8", errors="replace"))
        response.raise_for_status()
        return body

    @classmethod
    def decode(cls, data: bytes) -> FeedMessage:
        """
        Decode protobuf bytes into a FeedMessage.

        Raises:
            DecodeError: If the bytes cannot be parsed or required fields are missing.
        """
        feed = gtfs_realtime_pb2.FeedMessage()
        try:
            feed.ParseFromString(data)
        except ProtobufDecodeError as e:
            raise DecodeError(f"Malformed feed payload: {e}") from e
        if not feed.IsInitialized():
            raise DecodeError(f"Feed is missing required fields: {feed.FindInitializationErrors()}")

        entities: List[FeedEntity] = []
        for entity in feed.entity:
            trip_update = cls._parse_trip_update(entity) if entity.HasField("trip_update") else None
            alert = cls._parse_alert(entity) if entity.HasField("alert") else None
            if trip_update is None and alert is None:
                # Vehicle positions and deletions carry nothing we match on
                continue
            entities.append(FeedEntity(id=entity.id, trip_update=trip_update, alert=alert))

        logger.debug(f"Decoded {len(entities)} of {len(feed.entity)} entities")
        return FeedMessage(timestamp=feed.header.timestamp, entities=tuple(entities))

    @staticmethod
    def _parse_trip_update(entity) -> TripUpdate:
        trip_update = entity.trip_update
        route_id = trip_update.trip.route_id
        if not route_id:
            raise DecodeError(f"Trip update {entity.id!r} has no route_id")

        stop_time_updates = []
        for stop_time_update in trip_update.stop_time_update:
            if not stop_time_update.stop_id:
                raise DecodeError(f"Trip update {entity.id!r} has a stop time update without stop_id")

            # Origin stops only carry a departure time
            if stop_time_update.HasField("arrival") and stop_time_update.arrival.time:
                arrival_time = stop_time_update.arrival.time
            elif stop_time_update.HasField("departure") and stop_time_update.departure.time:
                arrival_time = stop_time_update.departure.time
            else:
                arrival_time = None

            stop_time_updates.append(StopTimeUpdate(stop_id=stop_time_update.stop_id, arrival_time=arrival_time))

        return TripUpdate(
            route_id=route_id,
            trip_id=trip_update.trip.trip_id,
            stop_time_updates=tuple(stop_time_updates),
        )

    @staticmethod
    def _parse_alert(entity) -> Alert:
        alert = entity.alert
        descriptions = [t.text for t in alert.description_text.translation if t.text]
        if not descriptions:
            descriptions = [t.text for t in alert.header_text.translation if t.text]
        if not descriptions:
            raise DecodeError(f"Alert {entity.id!r} has no description or header text")

        informed_entities = tuple(
            InformedEntity(
                stop_id=informed.stop_id or None,
                route_id=informed.route_id or (informed.trip.route_id if informed.HasField("trip") else "") or None,
            )
            for informed in alert.informed_entity
        )
        return Alert(informed_entities=informed_entities, descriptions=tuple(descriptions))
