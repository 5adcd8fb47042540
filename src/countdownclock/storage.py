"""On-disk state kept between runs: API key, last station and last report."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from .models import Direction, LineGroup, ReportEntry, Station

logger = logging.getLogger(__name__)

API_KEY_FILE = "mta_api_key.txt"
STATION_FILE = "mta_local_station.json"
REPORT_FILE = "mta_times.json"


class LocalStore:
    """Small file store rooted at a data directory."""

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _write(self, name: str, content: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._path(name).write_text(content + "\n", encoding="utf-8")

    def load_api_key(self) -> Optional[str]:
        path = self._path(API_KEY_FILE)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8").strip() or None

    def save_api_key(self, api_key: str) -> None:
        self._write(API_KEY_FILE, api_key.strip())

    def load_station(self) -> Optional[Station]:
        """Load the station saved by a previous run, or None if absent or unreadable."""
        path = self._path(STATION_FILE)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return Station(
                stop_code=data["stop_code"],
                direction=Direction.parse(data["direction"]),
                name=data["name"],
                line_groups=tuple(LineGroup(g) for g in data["line_groups"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable station cache {path}: {e}")
            return None

    def save_station(self, station: Station) -> None:
        self._write(
            STATION_FILE,
            json.dumps(
                {
                    "line_groups": [g.value for g in station.line_groups],
                    "name": station.name,
                    "stop_code": station.stop_code,
                    "direction": station.direction.value,
                }
            ),
        )
        logger.debug(f"Saved station {station.platform_key}")

    def save_report(self, report: List[ReportEntry]) -> None:
        """Write the last computed report as [[minutes, route], ...] for other programs."""
        self._write(REPORT_FILE, json.dumps([[r.minutes_remaining, r.route_id] for r in report]))

    def load_report(self) -> Optional[List[ReportEntry]]:
        path = self._path(REPORT_FILE)
        if not path.exists():
            return None
        return [ReportEntry(minutes, route_id) for minutes, route_id in json.loads(path.read_text(encoding="utf-8"))]
