"""Tests for AlertChecker."""

import unittest
from unittest.mock import MagicMock
import sys
from pathlib import Path

# Add src to path so we can import countdownclock
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from countdownclock.alert_checker import AlertChecker
from countdownclock.config import ALERTS_URL
from countdownclock.exceptions import Unexplained
from countdownclock.models import (
    Alert,
    ArrivalEvent,
    Direction,
    FeedEntity,
    FeedMessage,
    InformedEntity,
    LineGroup,
    RunContext,
    Station,
)

STATION = Station(
    stop_code="A27",
    direction=Direction.SOUTH,
    name="42 St-Port Authority Bus Terminal",
    line_groups=(LineGroup.ACE,),
)


def alert(*texts, stops=(), routes=()) -> FeedEntity:
    entities = tuple(InformedEntity(stop_id=s) for s in stops) + tuple(InformedEntity(route_id=r) for r in routes)
    return FeedEntity(id=texts[0][:10], alert=Alert(informed_entities=entities, descriptions=tuple(texts)))


def checker_for(*entities):
    client = MagicMock()
    client.fetch.return_value = FeedMessage(timestamp=0, entities=tuple(entities))
    return AlertChecker(client), client


class TestAlertChecker(unittest.TestCase):
    """Test the service alert fallback."""

    def test_fetches_alert_feed(self):
        checker, client = checker_for(alert("No trains at 42 St-Port Authority Bus Terminal", stops=["A27"]))
        checker.explain_absence(STATION)
        client.fetch.assert_called_once_with(ALERTS_URL)

    def test_stop_alert_explains(self):
        """Test an alert scoped to the stop that names it."""
        text = "Southbound trains skip 42 St-Port Authority Bus Terminal"
        checker, _ = checker_for(alert(text, stops=["A27"]))
        self.assertEqual(checker.explain_absence(STATION), text)

    def test_stop_alerts_accumulate(self):
        """Test several stop alerts are concatenated in feed order."""
        first = "Elevator outage. "
        second = "Trains bypass 42 St-Port Authority Bus Terminal."
        checker, _ = checker_for(alert(first, stops=["A27"]), alert(second, stops=["A27"]))
        self.assertEqual(checker.explain_absence(STATION), first + second)

    def test_route_alert_with_station_name(self):
        """Test a route alert naming the station explains the absence."""
        text = "A trains are not stopping at 42 St-Port Authority Bus Terminal"
        checker, _ = checker_for(alert(text, routes=["A"]))
        self.assertEqual(checker.explain_absence(STATION), text)

    def test_route_alert_without_station_name_is_unexplained(self):
        """Test a route alert that does not name the station."""
        checker, _ = checker_for(alert("A trains are delayed in Queens", routes=["A"]))
        with self.assertRaises(Unexplained) as ctx:
            checker.explain_absence(STATION)
        self.assertEqual(ctx.exception.diagnostics["Stop ID"], "A27")

    def test_route_for_other_group_ignored(self):
        """Test alerts on routes that do not serve the station."""
        checker, _ = checker_for(alert("Q trains bypass 42 St-Port Authority Bus Terminal", routes=["Q"]))
        with self.assertRaises(Unexplained):
            checker.explain_absence(STATION)

    def test_route_match_is_case_insensitive(self):
        text = "Shuttle suspended at 42 St-Port Authority Bus Terminal"
        checker, _ = checker_for(alert(text, routes=["fs"]))
        self.assertEqual(checker.explain_absence(STATION), text)

    def test_route_text_not_repeated(self):
        """Test route alert text already present from a stop alert is not appended again."""
        text = "No A trains at 42 St-Port Authority Bus Terminal"
        checker, _ = checker_for(
            alert(text, stops=["A27"], routes=["A"]),
            alert(text, routes=["C"]),
        )
        self.assertEqual(checker.explain_absence(STATION), text)

    def test_all_translations_considered_for_routes(self):
        """Test every translation of a route alert is staged."""
        plain = "A trains are delayed"
        html = "<p>A trains skip 42 St-Port Authority Bus Terminal</p>"
        checker, _ = checker_for(alert(plain, html, routes=["A"]))
        self.assertEqual(checker.explain_absence(STATION), html)

    def test_stop_alert_without_name_is_unexplained(self):
        """Test stop alert text must still mention the station."""
        checker, _ = checker_for(alert("Elevator outage", stops=["A27"]))
        with self.assertRaises(Unexplained) as ctx:
            checker.explain_absence(STATION)
        self.assertEqual(ctx.exception.diagnostics["Alert Text"], "Elevator outage")

    def test_no_alerts_is_unexplained(self):
        checker, _ = checker_for()
        with self.assertRaises(Unexplained):
            checker.explain_absence(STATION)

    def test_diagnostics_include_context(self):
        """Test the failure carries the times gathered earlier in the run."""
        context = RunContext(station=STATION, events=[ArrivalEvent(1699999000, "A")])
        checker, _ = checker_for(alert("Unrelated", routes=["E"]))
        with self.assertRaises(Unexplained) as ctx:
            checker.explain_absence(STATION, context=context)

        diagnostics = ctx.exception.diagnostics
        self.assertEqual(diagnostics["Times"], [[1699999000, "A"]])
        self.assertEqual(diagnostics["Relevant Routes"], ["ace"])
        self.assertEqual(context.alert_text, "")
        self.assertIn("It's unclear why", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
