# Errors raised by the log-to-QPS pipeline. Lines that fail to parse are
# skipped, not raised.


class QpsError(Exception):
    """Base class for fatal pipeline errors."""


class InputError(QpsError):
    # log file missing or unreadable
    pass


class EmptyResultError(QpsError):
    # nothing to plot: no timestamps parsed, or no buckets produced
    pass


class InvalidConfiguration(QpsError, ValueError):
    # e.g. an interval below one second
    pass
