"""Static tables and runtime settings."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Optional

from .models import LineGroup

FEED_BASE_URL = "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds"

# MTA GTFS-Realtime feed URLs (subway only), one per line group
FEED_URLS: Dict[LineGroup, str] = {
    LineGroup.IRT: f"{FEED_BASE_URL}/nyct%2Fgtfs",
    LineGroup.ACE: f"{FEED_BASE_URL}/nyct%2Fgtfs-ace",
    LineGroup.BDFM: f"{FEED_BASE_URL}/nyct%2Fgtfs-bdfm",
    LineGroup.G: f"{FEED_BASE_URL}/nyct%2Fgtfs-g",
    LineGroup.JZ: f"{FEED_BASE_URL}/nyct%2Fgtfs-jz",
    LineGroup.L: f"{FEED_BASE_URL}/nyct%2Fgtfs-l",
    LineGroup.NQRW: f"{FEED_BASE_URL}/nyct%2Fgtfs-nqrw",
    LineGroup.SIR: f"{FEED_BASE_URL}/nyct%2Fgtfs-si",
}

ALERTS_URL = f"{FEED_BASE_URL}/camsys%2Fsubway-alerts"

STATIONS_URL = "https://atisdata.s3.amazonaws.com/Station/Stations.csv"

# Lowercased line codes carried by each feed. Covers both the daytime route
# codes in Stations.csv and the route_id values used in the feeds.
# "s" is ambiguous in Stations.csv: 42 St shuttle (GS) is in the IRT feed,
# Franklin Av (FS) and Rockaway Park (H) shuttles are in the ACE feed.
LINE_GROUP_CODES: Dict[LineGroup, FrozenSet[str]] = {
    LineGroup.IRT: frozenset({"1", "2", "3", "4", "5", "5x", "6", "6x", "7", "7x", "gs", "s"}),
    LineGroup.ACE: frozenset({"a", "c", "e", "h", "fs", "s"}),
    LineGroup.BDFM: frozenset({"b", "d", "f", "fx", "m"}),
    LineGroup.G: frozenset({"g"}),
    LineGroup.JZ: frozenset({"j", "z"}),
    LineGroup.L: frozenset({"l"}),
    LineGroup.NQRW: frozenset({"n", "q", "r", "w"}),
    LineGroup.SIR: frozenset({"sir", "si"}),
}

DEFAULT_DATA_DIR = Path.home() / ".countdownclock"


@dataclass
class Settings:
    """Runtime settings, overridable through environment variables."""
    api_key: Optional[str] = None
    data_dir: Path = DEFAULT_DATA_DIR
    timeout: float = 2.0  # Seconds per attempt
    attempts: int = 3  # Initial attempt + 2 retries
    retry_delay: float = 5.0
    stations_url: str = STATIONS_URL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from MTA_API_KEY and COUNTDOWN_* variables."""
        settings = cls(api_key=os.getenv("MTA_API_KEY") or None)
        if os.getenv("COUNTDOWN_DATA_DIR"):
            settings.data_dir = Path(os.environ["COUNTDOWN_DATA_DIR"]).expanduser()
        if os.getenv("COUNTDOWN_TIMEOUT"):
            settings.timeout = float(os.environ["COUNTDOWN_TIMEOUT"])
        if os.getenv("COUNTDOWN_RETRY_DELAY"):
            settings.retry_delay = float(os.environ["COUNTDOWN_RETRY_DELAY"])
        if os.getenv("COUNTDOWN_STATIONS_URL"):
            settings.stations_url = os.environ["COUNTDOWN_STATIONS_URL"]
        return settings


def groups_for_code(code: str):
    """Return every line group whose code set contains ``code`` (any case)."""
    code = code.strip().lower()
    return [group for group, codes in LINE_GROUP_CODES.items() if code in codes]
