# Buckets request timestamps into fixed-width intervals and turns the counts
# into a gap-free time series, optionally written out as CSV.
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, Tuple

import numpy as np
import pandas as pd

from log_timestamps import TimestampSet
from qps_errors import InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntervalBucket:
    start: datetime
    count: int

    @property
    def value(self) -> float:
        # raw request count; not divided by the interval width
        return float(self.count)


@dataclass(frozen=True)
class QpsSeries:
    """Contiguous buckets sorted by start, ``interval_seconds`` apart."""
    buckets: Tuple[IntervalBucket, ...]
    interval_seconds: int

    def __len__(self):
        return len(self.buckets)

    def __iter__(self) -> Iterator[IntervalBucket]:
        return iter(self.buckets)

    @property
    def is_empty(self) -> bool:
        return not self.buckets

    @property
    def total(self) -> int:
        return sum(bucket.count for bucket in self.buckets)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                'timestamp': [bucket.start for bucket in self.buckets],
                'request_count': [bucket.count for bucket in self.buckets],
                'qps': [bucket.value for bucket in self.buckets],
            }
        )


def check_interval(interval_seconds):
    # bool is an int subclass but never a meaningful interval
    if (
        not isinstance(interval_seconds, int)
        or isinstance(interval_seconds, bool)
        or interval_seconds < 1
    ):
        raise InvalidConfiguration(
            f"interval must be a whole number of seconds >= 1, got {interval_seconds!r}"
        )


def _seconds_between(start, end):
    return int((end - start).total_seconds())


def aggregate(timestamps: TimestampSet, interval_seconds: int) -> QpsSeries:
    check_interval(interval_seconds)
    logger.info("Counting requests in %d second intervals...", interval_seconds)

    if timestamps.is_empty:
        logger.info("No timestamps to aggregate")
        return QpsSeries((), interval_seconds)

    time_min = timestamps.time_min
    bucket_count = _seconds_between(time_min, timestamps.time_max) // interval_seconds + 1

    # t >= time_min for every timestamp, so integer division floors
    offsets = np.fromiter(
        (_seconds_between(time_min, ts) for ts in timestamps.timestamps),
        dtype=np.int64,
        count=len(timestamps),
    )
    counts = np.bincount(offsets // interval_seconds, minlength=bucket_count)

    step = timedelta(seconds=interval_seconds)
    buckets = tuple(
        IntervalBucket(start=time_min + index * step, count=int(count))
        for index, count in enumerate(counts)
    )

    logger.info("Aggregation done, %d data points", len(buckets))
    return QpsSeries(buckets, interval_seconds)


def write_csv(series: QpsSeries, csv_path):
    series.to_frame().to_csv(csv_path, index=False)
    logger.info("Wrote %d rows to %s", len(series), csv_path)
