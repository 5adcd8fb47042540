"""Resolves a rider-facing stop code to a station and the feeds serving it."""

import io
import logging
import re
from typing import List, Optional, Tuple

import pandas as pd
import requests

from .config import STATIONS_URL, groups_for_code
from .exceptions import InvalidInput, StationNotFound
from .models import Direction, Station

logger = logging.getLogger(__name__)

STOP_CODE_COLUMN = "gtfs_stop_id"
ROUTES_COLUMN = "daytime_routes"
NAME_COLUMN = "stop_name"


def _normalize_column(name: str) -> str:
    """'GTFS Stop ID' -> 'gtfs_stop_id'."""
    return re.sub(r"[^0-9a-z]+", "_", name.strip().lower()).strip("_")


class StationResolver:
    """Looks up stations in the MTA Stations.csv reference dataset."""

    def __init__(self, stations: Optional[pd.DataFrame] = None):
        """
        Initialize the resolver.

        Args:
            stations: Optional reference dataset already in memory. If None, call
                      one of the load_* methods before resolving.
        """
        self.stations: Optional[pd.DataFrame] = None
        if stations is not None:
            self.load_from_dataframe(stations)

    def load_from_url(self, url: str = STATIONS_URL, timeout: float = 10) -> None:
        """Download and load Stations.csv."""
        logger.info(f"Downloading station list from {url}")
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        self.load_from_dataframe(pd.read_csv(io.StringIO(response.text), dtype=str, keep_default_na=False))

    def load_from_file(self, path) -> None:
        """Load Stations.csv from a local file."""
        logger.info(f"Loading station list from {path}")
        self.load_from_dataframe(pd.read_csv(path, dtype=str, keep_default_na=False))

    def load_from_dataframe(self, stations: pd.DataFrame) -> None:
        stations = stations.rename(columns=_normalize_column)
        missing = {STOP_CODE_COLUMN, ROUTES_COLUMN, NAME_COLUMN} - set(stations.columns)
        if missing:
            raise ValueError(f"Station list is missing columns: {sorted(missing)}")
        self.stations = stations.fillna("").astype(str)
        logger.info(f"Loaded {len(self.stations)} stations")

    @staticmethod
    def validate(stop_code: str, direction) -> Tuple[str, Direction]:
        """Normalize a stop code and direction, raising InvalidInput if malformed."""
        if not isinstance(stop_code, str) or not stop_code.strip():
            raise InvalidInput(
                "You are missing a valid Stop ID (e.g. A27). "
                "The correct format is: {command} {GTFS Stop ID} {Direction}"
            )
        return stop_code.strip().upper(), Direction.parse(direction)

    def resolve(self, stop_code: str, direction) -> Station:
        """
        Resolve a stop code and direction to a Station.

        Args:
            stop_code: GTFS stop ID as published in Stations.csv (e.g., "A27").
            direction: "N"/"S" or "North"/"South", any case.

        Returns:
            Station with its deduplicated, sorted line groups.

        Raises:
            InvalidInput: If the stop code or direction is malformed.
            StationNotFound: If no serviceable row matches the stop code.
        """
        stop_code, parsed_direction = self.validate(stop_code, direction)

        if self.stations is None:
            raise RuntimeError("Station list not loaded")

        matches = self.stations[self.stations[STOP_CODE_COLUMN].str.strip().str.upper() == stop_code]
        if matches.empty:
            raise StationNotFound(stop_code)

        row = matches.iloc[0]
        codes = self._split_codes(row[ROUTES_COLUMN])
        if not codes:
            raise StationNotFound(stop_code, "no daytime routes serve this stop")

        groups = set()
        for code in codes:
            matched = groups_for_code(code)
            if not matched:
                logger.debug(f"Ignoring unknown line code {code!r} at {stop_code}")
            groups.update(matched)

        if not groups:
            raise StationNotFound(stop_code, f"none of the routes {codes} has a known feed")

        station = Station(
            stop_code=stop_code,
            direction=parsed_direction,
            name=row[NAME_COLUMN].strip(),
            line_groups=tuple(sorted(groups, key=lambda g: g.value)),
        )
        logger.debug(f"Resolved {station.platform_key} to {station.name} via {[g.value for g in station.line_groups]}")
        return station

    @staticmethod
    def _split_codes(routes: str) -> List[str]:
        """Split a whitespace-delimited route field into unique lowercase codes."""
        return sorted(set(routes.lower().split()))

