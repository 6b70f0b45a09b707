"""Generate a pollutant forecast and health alerts from an hourly history CSV."""

import argparse
import json
import logging
import sys
from pathlib import Path

from airwatch.alerts import HttpAlertSink
from airwatch.pipeline import run_forecast_from_file

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer; got {value}")
    return number


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Airwatch pollutant forecast")
    parser.add_argument("--history", type=Path, help="Hourly history CSV (defaults to data.history_file)")
    parser.add_argument("--city", help="Location label for the forecast and alerts")
    parser.add_argument("--hours", type=positive_int, help="Forecast horizon in hours")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    parser.add_argument("--alert-endpoint", help="URL that receives triggered alerts")
    parser.add_argument("--timeout", type=float, default=10.0, help="Alert delivery timeout (seconds)")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the forecast pipeline and print the result as JSON."""
    args = parse_args(argv)

    sink = HttpAlertSink(args.alert_endpoint, timeout=args.timeout) if args.alert_endpoint else None

    try:
        payload = run_forecast_from_file(
            history_path=args.history,
            city=args.city,
            config_path=args.config,
            sink=sink,
            horizon=args.hours,
        )
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Cannot forecast: {e}")
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
