# Draws a QpsSeries as a line-and-point PNG chart with matplotlib.
import logging
from pathlib import Path

import matplotlib

matplotlib.use('Agg')

import matplotlib.dates as mdates
import matplotlib.pyplot as plt

from qps_errors import EmptyResultError

logger = logging.getLogger(__name__)

CHART_WIDTH = 1800
CHART_HEIGHT = 768
CHART_DPI = 100
X_TICKS = 8


def time_label_format(interval):
    if interval < 60:
        return '%H:%M:%S'
    if interval < 3600:
        return '%H:%M'
    return '%m-%d %H:%M'


def chart_title(log_path, interval):
    name = Path(log_path).name or 'unknown file'
    return f"{name} Nginx requests ({interval}s interval)"


def render_chart(series, output, interval, log_path):
    if series.is_empty:
        raise EmptyResultError("No valid QPS data to plot")

    logger.info("Rendering QPS chart...")
    times = [bucket.start for bucket in series]
    values = [bucket.value for bucket in series]
    tz = times[0].tzinfo

    fig, ax = plt.subplots(
        figsize=(CHART_WIDTH / CHART_DPI, CHART_HEIGHT / CHART_DPI),
        dpi=CHART_DPI,
    )
    try:
        fig.patch.set_facecolor('white')
        ax.plot(times, values, '-o', color='blue', alpha=0.8, markersize=2, label='Requests')

        # headroom above the peak, never below 1
        ax.set_ylim(0, max(max(values) * 1.1, 1.0))
        if times[0] != times[-1]:
            ax.set_xlim(times[0], times[-1])

        ax.xaxis.set_major_locator(mdates.AutoDateLocator(tz=tz, maxticks=X_TICKS))
        ax.xaxis.set_major_formatter(mdates.DateFormatter(time_label_format(interval), tz=tz))
        ax.set_ylabel('Requests', fontsize=15)
        ax.set_title(chart_title(log_path, interval), fontsize=30)
        ax.grid(True, alpha=0.3)
        ax.legend(loc='upper right', facecolor='white', edgecolor='black', framealpha=0.8)

        fig.savefig(output, dpi=CHART_DPI, facecolor='white')
    finally:
        plt.close(fig)

    logger.debug("Wrote %dx%d chart to %s", CHART_WIDTH, CHART_HEIGHT, output)
