# Pulls request timestamps out of nginx/apache access log lines, e.g.
#   47.100.64.252 - - [18/Mar/2025:00:00:04 +0800] "GET / HTTP/1.1" 404 236 ...
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Tuple

from qps_errors import InputError

logger = logging.getLogger(__name__)

TIMESTAMP_PATTERN = re.compile(r'\[(\d{2}/\w{3}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4})\]')
TIMESTAMP_FORMAT = '%d/%b/%Y:%H:%M:%S %z'


@dataclass(frozen=True)
class TimestampSet:
    timestamps: Tuple[datetime, ...]
    time_min: datetime
    time_max: datetime

    def __len__(self):
        return len(self.timestamps)

    @property
    def is_empty(self) -> bool:
        # an empty log leaves time_min at "now" and time_max at the epoch
        return not self.timestamps or self.time_min > self.time_max


def parse_timestamp(line):
    """Return the line's bracketed timestamp in local time, or None.

    None covers both lines without a timestamp field and fields that are not
    a real date (e.g. ``[31/Feb/2025:00:00:00 +0000]``).
    """
    match = TIMESTAMP_PATTERN.search(line)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT).astimezone()
    except ValueError:
        return None


# Scans the lines once, keeping every parsed timestamp plus the running min/max
def extract(lines: Iterable[str]) -> TimestampSet:
    timestamps = []
    time_min = datetime.now().astimezone()
    time_max = datetime.fromtimestamp(0, tz=timezone.utc).astimezone()
    skipped = 0

    for line in lines:
        timestamp = parse_timestamp(line)
        if timestamp is None:
            skipped += 1
            continue
        timestamps.append(timestamp)
        if timestamp < time_min:
            time_min = timestamp
        if timestamp > time_max:
            time_max = timestamp

    logger.debug("Skipped %d lines without a valid timestamp", skipped)
    return TimestampSet(tuple(timestamps), time_min, time_max)


def read_log(log_path) -> TimestampSet:
    logger.info("Parsing log file: %s", log_path)
    try:
        # undecodable bytes are replaced so a single bad line can't abort the run
        with open(log_path, 'r', encoding='utf-8', errors='replace') as f:
            result = extract(f)
    except OSError as e:
        raise InputError(f"Cannot read log file {log_path}: {e}") from e

    logger.info("Parsed %d log records", len(result))
    if not result.is_empty:
        logger.info("Time range: %s to %s", result.time_min, result.time_max)
    return result
