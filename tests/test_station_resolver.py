"""Tests for StationResolver."""

import io
import tempfile
import unittest
from unittest.mock import patch, MagicMock
import sys
from pathlib import Path

import pandas as pd

# Add src to path so we can import countdownclock
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from countdownclock.exceptions import InvalidInput, StationNotFound
from countdownclock.models import Direction, LineGroup
from countdownclock.station_resolver import StationResolver

STATIONS_CSV = """Station ID,Complex ID,GTFS Stop ID,Division,Line,Stop Name,Borough,Daytime Routes,Structure
1,1,R01,BMT,Astoria,Astoria-Ditmars Blvd,Q,N W,Elevated
151,151,A27,IND,8th Av - Fulton St,42 St-Port Authority Bus Terminal,M,A C E,Subway
167,167,D14,IND,6th Av - Culver,7 Av,M,B D E,Subway
611,611,R16,BMT,Broadway,Times Sq-42 St,M,N Q R W,Subway
468,611,902,IRT,42nd St Shuttle,Times Sq-42 St,M,S,Subway
627,627,S09,SIR,Staten Island,Tottenville,SI,SIR,At Grade
999,999,X99,IND,Closed,Closed Station,M,,Subway
998,998,X98,IND,Unknown,Mystery Station,M,K,Subway
"""


def load_resolver() -> StationResolver:
    return StationResolver(pd.read_csv(io.StringIO(STATIONS_CSV), dtype=str, keep_default_na=False))


class TestStationResolver(unittest.TestCase):
    """Test station resolution against Stations.csv."""

    def setUp(self):
        self.resolver = load_resolver()

    def test_columns_are_normalized(self):
        """Test that Stations.csv headers become snake_case columns."""
        self.assertIn("gtfs_stop_id", self.resolver.stations.columns)
        self.assertIn("daytime_routes", self.resolver.stations.columns)
        self.assertIn("stop_name", self.resolver.stations.columns)

    def test_resolve_single_group(self):
        """Test a stop served by one feed."""
        station = self.resolver.resolve("A27", "S")
        self.assertEqual(station.stop_code, "A27")
        self.assertEqual(station.direction, Direction.SOUTH)
        self.assertEqual(station.name, "42 St-Port Authority Bus Terminal")
        self.assertEqual(station.line_groups, (LineGroup.ACE,))
        self.assertEqual(station.platform_key, "A27S")

    def test_resolve_multiple_groups_sorted(self):
        """Test a stop served by several feeds gets each feed once, sorted."""
        station = self.resolver.resolve("D14", "N")
        self.assertEqual(station.line_groups, (LineGroup.ACE, LineGroup.BDFM))

    def test_single_character_code_does_not_match_inside_bundle(self):
        """Test that codes match whole entries, not substrings of a group."""
        station = self.resolver.resolve("R01", "N")
        self.assertEqual(station.line_groups, (LineGroup.NQRW,))

    def test_shuttle_queries_both_shuttle_feeds(self):
        """Test the ambiguous shuttle code maps to every feed carrying a shuttle."""
        station = self.resolver.resolve("902", "S")
        self.assertEqual(station.line_groups, (LineGroup.IRT, LineGroup.ACE))

    def test_staten_island_railway(self):
        """Test the SIR daytime code resolves to the SIR feed."""
        station = self.resolver.resolve("S09", "N")
        self.assertEqual(station.line_groups, (LineGroup.SIR,))

    def test_direction_is_case_insensitive(self):
        """Test lowercase and long-form directions."""
        self.assertEqual(self.resolver.resolve("a27", "s").direction, Direction.SOUTH)
        self.assertEqual(self.resolver.resolve("A27", "north").direction, Direction.NORTH)

    def test_invalid_direction(self):
        """Test error handling for a direction other than N/S."""
        with self.assertRaises(InvalidInput):
            self.resolver.resolve("A27", "E")

    def test_empty_stop_code(self):
        """Test error handling for a missing stop code."""
        with self.assertRaises(InvalidInput):
            self.resolver.resolve("", "N")
        with self.assertRaises(InvalidInput):
            self.resolver.resolve(None, "N")

    def test_invalid_input_checked_before_dataset(self):
        """Test that malformed input fails even with no station list loaded."""
        resolver = StationResolver()
        with self.assertRaises(InvalidInput):
            resolver.resolve("A27", "X")

    def test_station_not_found(self):
        """Test error handling for a stop code absent from the list."""
        with self.assertRaises(StationNotFound) as ctx:
            self.resolver.resolve("NONEXISTENT", "N")
        self.assertIn("Stations.csv", str(ctx.exception))

    def test_station_without_routes(self):
        """Test a matching row with no daytime routes."""
        with self.assertRaises(StationNotFound):
            self.resolver.resolve("X99", "N")

    def test_station_with_only_unknown_routes(self):
        """Test a matching row whose routes have no known feed."""
        with self.assertRaises(StationNotFound):
            self.resolver.resolve("X98", "S")

    def test_resolve_without_dataset(self):
        """Test resolving before any station list is loaded."""
        with self.assertRaises(RuntimeError):
            StationResolver().resolve("A27", "N")

    def test_missing_columns(self):
        """Test loading a dataset without the expected columns."""
        with self.assertRaises(ValueError):
            StationResolver(pd.DataFrame({"foo": ["bar"]}))

    def test_validate(self):
        """Test stop codes and directions are normalized without a dataset."""
        self.assertEqual(StationResolver.validate(" a27 ", "south"), ("A27", Direction.SOUTH))
        with self.assertRaises(InvalidInput):
            StationResolver.validate("A27", "W")

    def test_load_from_file(self):
        """Test loading Stations.csv from disk."""
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "Stations.csv"
            path.write_text(STATIONS_CSV, encoding="utf-8")

            resolver = StationResolver()
            resolver.load_from_file(path)

        self.assertEqual(len(resolver.stations), 8)
        # Numeric-looking stop codes stay strings
        self.assertEqual(resolver.resolve("902", "N").name, "Times Sq-42 St")
        with self.assertRaises(StationNotFound):
            resolver.resolve("X99", "S")

    @patch("countdownclock.station_resolver.requests.get")
    def test_load_from_url(self, mock_get):
        """Test downloading the station list."""
        mock_response = MagicMock()
        mock_response.text = STATIONS_CSV
        mock_get.return_value = mock_response

        resolver = StationResolver()
        resolver.load_from_url("http://test/Stations.csv")

        mock_get.assert_called_once()
        self.assertEqual(len(resolver.stations), 8)
        self.assertEqual(resolver.resolve("R16", "N").name, "Times Sq-42 St")


if __name__ == "__main__":
    unittest.main()
