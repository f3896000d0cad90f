"""History look-back windows and minimum-gap decimation for charting."""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from enum import Enum

from coldchain.services.records import TelemetryReading

MIN_GAP = timedelta(milliseconds=600_000)
MAX_HISTORY_LIMIT = 10_000


class HistoryPeriod(str, Enum):
    """Look-back window accepted by the history endpoint."""

    ONE_HOUR = "1h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"
    ALL = "all"


_PERIOD_SPANS: dict[HistoryPeriod, timedelta] = {
    HistoryPeriod.ONE_HOUR: timedelta(hours=1),
    HistoryPeriod.ONE_DAY: timedelta(hours=24),
    HistoryPeriod.SEVEN_DAYS: timedelta(days=7),
}


def lookback_cutoff(period: HistoryPeriod, now: datetime | None = None) -> datetime | None:
    """Return the earliest timestamp included by ``period``, or None for "all"."""
    span = _PERIOD_SPANS.get(HistoryPeriod(period))
    if span is None:
        return None
    return (now or datetime.now(timezone.utc)) - span


def downsample(
    readings: Sequence[TelemetryReading], min_gap: timedelta = MIN_GAP
) -> list[TelemetryReading]:
    """Thin a newest-first series so kept points are at least ``min_gap`` apart.

    The first element is always kept. Each later element is kept only when
    its distance to the last kept element is >= ``min_gap``. The distance is
    absolute, so the result does not depend on the direction of the series.
    """
    kept: list[TelemetryReading] = []
    last_kept: datetime | None = None

    for reading in readings:
        if last_kept is None or abs(reading.timestamp - last_kept) >= min_gap:
            kept.append(reading)
            last_kept = reading.timestamp

    return kept
