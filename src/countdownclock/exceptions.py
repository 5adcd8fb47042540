"""Errors raised by the countdown pipeline.

Every error here is fatal for a single invocation. Only the transient network
failures behind FeedUnavailable are retried, inside the feed client.
"""

from typing import Any, Dict, Optional

STATIONS_LIST_HINT = (
    "For a list of Stop IDs, check: https://atisdata.s3.amazonaws.com/Station/Stations.csv"
)


class CountdownError(Exception):
    """Base class for all countdown clock errors."""


class InvalidInput(CountdownError, ValueError):
    """Malformed stop code or direction."""


class StationNotFound(CountdownError, LookupError):
    """The reference dataset has no serviceable row for a stop code."""

    def __init__(self, stop_code: str, reason: str = "no matching station"):
        self.stop_code = stop_code
        super().__init__(f"Stop ID {stop_code!r}: {reason}. {STATIONS_LIST_HINT}")


class AuthError(CountdownError):
    """The feed endpoint rejected the API key."""

    def __init__(self, api_key: str, body: str = ""):
        self.api_key = api_key
        self.body = body
        super().__init__(
            f"Authorization error. Likely an invalid API key.\nThe API key used was:\n{api_key}"
        )


class FeedUnavailable(CountdownError):
    """A feed could not be retrieved after exhausting all attempts."""

    def __init__(self, endpoint: str, cause: Optional[BaseException] = None, attempts: int = 0):
        self.endpoint = endpoint
        self.cause = cause
        self.attempts = attempts
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"MTA API inaccessible after {attempts} attempt(s) ({endpoint}): {detail}")


class DecodeError(CountdownError):
    """A response body is not a valid GTFS-realtime feed message."""


class Unexplained(CountdownError):
    """No arrivals were found and no service alert accounts for it."""

    def __init__(self, diagnostics: Dict[str, Any]):
        self.diagnostics = diagnostics
        lines = ["It's unclear why there are not any times to display."]
        for key, value in diagnostics.items():
            lines.append(f"{key}: {value}")
        super().__init__("\n".join(lines))
