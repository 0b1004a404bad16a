"""
Numeric helpers shared by the engines and by downstream reporting.

Everything here is pure and stateless. Empty input yields zeros rather
than raising, matching how the heuristics treat absent signal.
"""

import math
import statistics as stats
from typing import Callable, Iterable, Sequence, TypeVar

from pydantic import BaseModel

from models.event import EditEvent

T = TypeVar("T")


class Statistics(BaseModel):
    mean: float = 0.0
    median: float = 0.0
    min: float = 0.0
    max: float = 0.0
    std_dev: float = 0.0    # population standard deviation
    count: int = 0


class OutlierReport(BaseModel):
    outliers: list[float] = []
    lower_bound: float = 0.0
    upper_bound: float = 0.0
    q1: float = 0.0
    q3: float = 0.0
    iqr: float = 0.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# ---------- Descriptive statistics ----------

def calculate_statistics(values: Sequence[float]) -> Statistics:
    if not values:
        return Statistics()

    return Statistics(
        mean=stats.fmean(values),
        median=stats.median(values),
        min=min(values),
        max=max(values),
        std_dev=stats.pstdev(values),
        count=len(values),
    )


def calculate_typing_speed_stats(events: Sequence[EditEvent]) -> Statistics:
    return calculate_statistics([e.instant_typing_speed for e in events if e.instant_typing_speed > 0])


def calculate_content_length_stats(events: Sequence[EditEvent]) -> Statistics:
    return calculate_statistics([e.content_length for e in events])


def calculate_time_gap_stats(events: Sequence[EditEvent]) -> Statistics:
    """Statistics over the timestamp deltas between consecutive events."""
    if len(events) < 2:
        return Statistics()
    return calculate_statistics([b.timestamp - a.timestamp for a, b in zip(events, events[1:])])


# ---------- Event-level aggregates ----------

def calculate_time_span(events: Sequence[EditEvent]) -> int:
    if len(events) < 2:
        return 0
    timestamps = [e.timestamp for e in events]
    return max(timestamps) - min(timestamps)


def calculate_total_content_length(events: Iterable[EditEvent]) -> int:
    return sum(e.content_length for e in events)


def calculate_percentage(items: Sequence[T], predicate: Callable[[T], bool]) -> float:
    """Share of ``items`` matching ``predicate``, on a 0-100 scale."""
    if not items:
        return 0.0
    return sum(1 for item in items if predicate(item)) / len(items) * 100


def calculate_event_rate(events: Sequence[EditEvent]) -> float:
    """Events per minute across the span of the sequence."""
    if len(events) < 2:
        return 0.0
    minutes = calculate_time_span(events) / 60_000
    return len(events) / minutes if minutes > 0 else 0.0


def calculate_average_typing_speed(events: Sequence[EditEvent]) -> float:
    speeds = [e.instant_typing_speed for e in events if e.instant_typing_speed > 0]
    return stats.fmean(speeds) if speeds else 0.0


def calculate_burst_ratio(events: Sequence[EditEvent]) -> float:
    return calculate_percentage(events, lambda e: e.burst_detected)


def calculate_code_block_ratio(events: Sequence[EditEvent]) -> float:
    return calculate_percentage(events, lambda e: e.is_code_block)


def calculate_comment_ratio(events: Sequence[EditEvent]) -> float:
    return calculate_percentage(events, lambda e: e.is_comment)


def calculate_external_tool_ratio(events: Sequence[EditEvent]) -> float:
    return calculate_percentage(events, lambda e: e.has_external_signature)


# ---------- Signal processing ----------

def find_outliers(values: Sequence[float]) -> OutlierReport:
    """IQR outlier detection (1.5 * IQR fences). Needs at least 4 values."""
    if len(values) < 4:
        return OutlierReport()

    ordered = sorted(values)
    n = len(ordered)
    q1 = ordered[int(n * 0.25)]
    q3 = ordered[int(n * 0.75)]
    iqr = q3 - q1
    lower = q1 - 1.5 * iqr
    upper = q3 + 1.5 * iqr

    return OutlierReport(
        outliers=[v for v in values if v < lower or v > upper],
        lower_bound=lower,
        upper_bound=upper,
        q1=q1,
        q3=q3,
        iqr=iqr,
    )


def calculate_rolling_average(values: Sequence[float], window_size: int) -> list[float]:
    """Trailing mean; the first few points average over what is available."""
    if window_size <= 0 or window_size > len(values):
        return list(values)

    result = []
    for i in range(len(values)):
        window = values[max(0, i - window_size + 1):i + 1]
        result.append(sum(window) / len(window))
    return result


def normalize_values(values: Sequence[float]) -> list[float]:
    """Min-max scale to 0.0 - 1.0. A flat series maps to all zeros."""
    if not values:
        return []
    low, high = min(values), max(values)
    spread = high - low
    if spread == 0:
        return [0.0 for _ in values]
    return [(v - low) / spread for v in values]


def calculate_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation; 0.0 when lengths differ, input is empty, or either side is flat."""
    if len(x) != len(y) or not x:
        return 0.0

    n = len(x)
    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(a * b for a, b in zip(x, y))
    sum_xx = sum(a * a for a in x)
    sum_yy = sum(b * b for b in y)

    numerator = n * sum_xy - sum_x * sum_y
    denominator_sq = (n * sum_xx - sum_x ** 2) * (n * sum_yy - sum_y ** 2)
    if denominator_sq <= 0:
        return 0.0
    return numerator / math.sqrt(denominator_sq)
