# This script parses an nginx access log, counts requests per fixed time
# interval (1s by default), and renders the counts as a QPS chart.
import argparse
import logging
import sys

from log_timestamps import read_log
from qps_chart import render_chart
from qps_errors import EmptyResultError, InvalidConfiguration, QpsError
from qps_stats import aggregate, check_interval, write_csv

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 1
DEFAULT_OUTPUT = 'qps_chart.png'
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def positive_interval(value):
    try:
        interval = int(value)
        check_interval(interval)
    except (ValueError, InvalidConfiguration):
        raise argparse.ArgumentTypeError(f"interval must be an integer >= 1, got {value!r}")
    return interval


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Plot per-interval request counts from an nginx access log"
    )
    parser.add_argument("-l", "--log-file", required=True, help="nginx access log to read")
    parser.add_argument(
        "-i",
        "--interval",
        type=positive_interval,
        default=DEFAULT_INTERVAL,
        help="bucket width in seconds, e.g. 1 for per second, 300 for every 5 minutes",
    )
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help="chart image to write")
    parser.add_argument("--csv", dest="csv_path", help="also write the per-interval counts as CSV")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def run(log_path, interval=DEFAULT_INTERVAL, output=DEFAULT_OUTPUT, csv_path=None):
    timestamps = read_log(log_path)
    series = aggregate(timestamps, interval)

    # nothing parsed: fail before the renderer is touched
    if series.is_empty:
        raise EmptyResultError(f"No valid timestamps found in {log_path}")

    render_chart(series, output, interval, log_path)
    if csv_path:
        write_csv(series, csv_path)
    return series


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        run(args.log_file, args.interval, args.output, args.csv_path)
    except QpsError as e:
        logger.error("%s", e)
        return 1

    logger.info("QPS chart saved as %s", args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
