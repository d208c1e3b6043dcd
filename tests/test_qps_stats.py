from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from log_timestamps import TimestampSet, extract
from qps_errors import InvalidConfiguration
from qps_stats import IntervalBucket, QpsSeries, aggregate, write_csv

CST = timezone(timedelta(hours=8))
BASE = datetime(2025, 3, 18, 0, 0, 0, tzinfo=CST)


def at(*seconds):
    timestamps = [BASE + timedelta(seconds=s) for s in seconds]
    return TimestampSet(tuple(timestamps), min(timestamps), max(timestamps))


def test_example_log_fills_gaps():
    series = aggregate(at(1, 1, 2, 5), 1)

    assert [b.start for b in series] == [BASE + timedelta(seconds=s) for s in range(1, 6)]
    assert [b.count for b in series] == [2, 1, 0, 0, 1]
    assert [b.value for b in series] == [2.0, 1.0, 0.0, 0.0, 1.0]


@pytest.mark.parametrize("interval", [1, 2, 3, 7, 60, 3600])
def test_bucket_count_and_spacing(interval):
    timestamps = at(0, 4, 4, 9, 61, 130, 3601)
    series = aggregate(timestamps, interval)

    assert len(series) == 3601 // interval + 1
    starts = [b.start for b in series]
    assert starts[0] == timestamps.time_min
    assert all(b - a == timedelta(seconds=interval) for a, b in zip(starts, starts[1:]))
    assert len(set(starts)) == len(starts)
    assert series.total == len(timestamps)
    assert series.interval_seconds == interval


@pytest.mark.parametrize("interval", [1, 10, 86400])
def test_single_timestamp(interval):
    series = aggregate(at(42), interval)
    assert list(series) == [IntervalBucket(BASE + timedelta(seconds=42), 1)]


def test_boundary_is_left_inclusive():
    # 0 and 9 in bucket 0, 10 in bucket 1, 19 in bucket 1, 20 in bucket 2
    series = aggregate(at(0, 9, 10, 19, 20), 10)
    assert [b.count for b in series] == [2, 2, 1]
    assert series.buckets[2].start == BASE + timedelta(seconds=20)


def test_max_lands_in_last_bucket():
    series = aggregate(at(0, 25), 10)
    assert len(series) == 3
    assert series.buckets[-1].count == 1
    assert series.buckets[-1].start == BASE + timedelta(seconds=20)


def test_unsorted_input():
    series = aggregate(at(5, 1, 3, 1), 2)
    # offsets 4, 0, 2, 0 from the earliest timestamp
    assert [b.count for b in series] == [2, 1, 1]


def test_mixed_offsets_bucket_by_instant():
    timestamps = extract([
        '[18/Mar/2025:00:00:00 +0800]',
        '[17/Mar/2025:16:00:01 +0000]',
        '[17/Mar/2025:17:00:02 +0100]',
    ])
    series = aggregate(timestamps, 1)
    assert [b.count for b in series] == [1, 1, 1]


def test_empty_set_gives_empty_series():
    series = aggregate(extract([]), 1)
    assert series.is_empty
    assert len(series) == 0
    assert series.total == 0


@pytest.mark.parametrize("interval", [0, -1, 1.5, "5", True, None])
def test_invalid_interval_rejected(interval):
    with pytest.raises(InvalidConfiguration):
        aggregate(at(1, 2), interval)


def test_invalid_interval_rejected_before_empty_check():
    with pytest.raises(InvalidConfiguration):
        aggregate(extract([]), 0)


def test_to_frame():
    df = aggregate(at(0, 0, 3), 2).to_frame()
    assert list(df.columns) == ['timestamp', 'request_count', 'qps']
    assert df['request_count'].tolist() == [2, 1]
    assert df['qps'].tolist() == [2.0, 1.0]


def test_empty_to_frame():
    df = QpsSeries((), 1).to_frame()
    assert df.empty


def test_write_csv(tmp_path):
    path = tmp_path / 'metrics.csv'
    write_csv(aggregate(at(1, 1, 2, 5), 1), path)

    df = pd.read_csv(path)
    assert df['request_count'].tolist() == [2, 1, 0, 0, 1]
    assert len(df) == 5
