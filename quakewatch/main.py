"""Command-line Entry Point.

Runs the refresh loop on a fixed timer: every tick fetches the feed,
evaluates new events and executes alert decisions. It's a thin wrapper
that loads configuration and invokes the Monitor.

Usage:
    # Poll forever using config/config.yaml
    python -m quakewatch.main

    # Single refresh, print the summary, new alerts and the current risk level
    python -m quakewatch.main --once

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import logging
import os
import sys
import threading

from quakewatch.core.config import Config, validate_config
from quakewatch.core.formatter import format_event_summary
from quakewatch.orchestrator import Monitor
from quakewatch.shell.config_loader import load_config, load_config_from_env


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def get_config(config_path: str | None = None) -> Config:
    """Load configuration from file or environment."""
    config_path = config_path or os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("QUAKEWATCH_MIN_MAGNITUDE"):
        # Simple env-based config
        return load_config_from_env()
    else:
        return load_config()


def run_loop(
    monitor: Monitor,
    interval_seconds: int,
    stop_event: threading.Event | None = None,
) -> None:
    """Refresh on a fixed interval until stop_event is set.

    Refreshes never overlap: the next tick waits for the previous cycle.
    """
    stop_event = stop_event or threading.Event()

    while not stop_event.is_set():
        result = monitor.refresh()
        logger.info("Completed: %s", result.summary)
        for error in result.errors:
            logger.error("Error: %s", error)

        stop_event.wait(interval_seconds)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Monitor the earthquake feed and raise alerts for new events",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single refresh and exit",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Override the polling interval in seconds",
    )
    args = parser.parse_args(argv)

    configure_logging()

    config = get_config(args.config)

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("%s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("%s: %s", error.field, error.message)
        return 1

    monitor = Monitor(config)

    if args.once:
        result = monitor.refresh()
        print(result.summary)
        for alert in result.alerts:
            print(f"  {format_event_summary(alert.decision.event)}")
        assessment = monitor.assess()
        if assessment is not None:
            print(
                f"Risk: {assessment.risk_level.value} "
                f"({assessment.overall_risk * 100:.0f}%)"
            )
        return 0 if result.success else 1

    interval = args.interval or config.polling_interval_seconds
    logger.info("Polling feed every %d seconds", interval)

    try:
        run_loop(monitor, interval)
    except KeyboardInterrupt:
        logger.info("Stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
