import argparse
import logging
import sys
from datetime import datetime

from itep_scheduler import config, run, schedule
from itep_scheduler.errors import RemoteSchedulingError, SchedulingFailed

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    import time

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def _iso_date(value: str) -> str:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")
    return value


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Book ITEP appointment slots as soon as the agenda opens.")
    parser.add_argument("--config", default=config.DEFAULT_CONFIG_FILE, help="Path to the YAML config file.")
    parser.add_argument("--now", action="store_true", help="Start immediately instead of waiting for schedule_time.")
    parser.add_argument(
        "--date", type=_iso_date, help="Target date in YYYY-MM-DD format. Defaults to the next working day."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main():
    args = parse_arguments()
    setup_logging(args.verbose)

    try:
        settings = config.load_config(args.config)
    except config.ConfigError as e:
        logger.error(f"Failed to initialize scheduler: {e}")
        sys.exit(1)

    if not args.now:
        schedule.wait_until_scheduled_time(settings.schedule_time)

    target_date = args.date or schedule.next_working_day(datetime.now()).isoformat()

    try:
        run.run(settings, target_date)
    except (SchedulingFailed, RemoteSchedulingError) as e:
        logger.error(f"Scheduling failed: {e}")
        sys.exit(1)
