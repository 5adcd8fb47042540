"""Terminal front end for the countdown clock."""

import argparse
import logging
import sys
from typing import List, Optional

from .config import Settings
from .exceptions import CountdownError, InvalidInput
from .models import ReportEntry
from .storage import LocalStore
from .tracker import CountdownClock

API_KEY_PROMPT = (
    "A valid MTA API key is required to use this script.\n\n"
    "You can request an API key from: https://api.mta.info/#/signup\n\n"
    "Paste your MTA API key here without quotes:"
)


def format_entry(entry: ReportEntry) -> str:
    """'A in 3 minutes. RUN!'"""
    minutes = entry.minutes_remaining
    unit = "minute" if minutes == 1 else "minutes"
    if minutes <= 2:
        hint = "Too late :("
    elif minutes <= 4:
        hint = "RUN!"
    else:
        hint = ""
    return f"{entry.route_id} in {minutes} {unit}. {hint}".rstrip()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="countdownclock",
        description="Countdown to the next subway trains at an MTA platform.",
    )
    parser.add_argument("stop_id", nargs="?", help="GTFS stop ID, e.g. A27 (omit to reuse the saved station)")
    parser.add_argument("direction", nargs="?", help="N or S")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-a", "--array", action="store_true", help="print the sorted [minutes, route] report")
    mode.add_argument("-d", "--debug", action="store_true", help="print stop, routes, raw times and report")
    parser.add_argument("-t", "--one-time", action="store_true", help="do not save the station or report")
    parser.add_argument("-n", "--count", type=int, default=5, help="number of trains to show (default 5)")
    parser.add_argument("--api-key", help="MTA API key (defaults to MTA_API_KEY or the saved key)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)
    if args.stop_id and not args.direction:
        parser.error("a direction (N or S) is required with a stop ID")
    return args


def get_api_key(args: argparse.Namespace, settings: Settings, store: LocalStore) -> str:
    """Use the given, configured or saved key, prompting for one on first run."""
    api_key = args.api_key or settings.api_key or store.load_api_key()
    if api_key:
        return api_key
    print(API_KEY_PROMPT)
    try:
        api_key = input().strip()
    except EOFError:
        api_key = ""
    if not api_key:
        raise InvalidInput("A valid MTA API key is required. Request one from: https://api.mta.info/#/signup")
    store.save_api_key(api_key)
    print("Key received!")
    return api_key


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = Settings.from_env()
    store = LocalStore(settings.data_dir)
    try:
        api_key = get_api_key(args, settings, store)
    except CountdownError as e:
        print(f"\n{e}\n", file=sys.stderr)
        return 1
    clock = CountdownClock(api_key, settings=settings, store=store)

    try:
        countdown = clock.get_countdown(args.stop_id, args.direction, save=not args.one_time)
    except CountdownError as e:
        print(f"\n{e}\n", file=sys.stderr)
        return 1
    finally:
        clock.cleanup()

    if args.array:
        print([[r.minutes_remaining, r.route_id] for r in countdown.report])
    elif args.debug:
        for key, value in clock.context.diagnostics().items():
            print(f"{key}: {value}")
    elif countdown.explanation is not None:
        print(countdown.explanation)
    else:
        for entry in countdown.report[: args.count]:
            print(format_entry(entry))
    return 0


if __name__ == "__main__":
    sys.exit(main())
