"""
Window aggregator.

Counts the days a traveler was present inside a date window. Both the entry
and the exit day count as a full day. Intervals of the same region are merged
into their union before summing, so duplicated or overlapping records are
never counted twice.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from stayguard.core.ontology import DateInterval, VisitInterval

Span = tuple[date, date]
IntervalLike = DateInterval | VisitInterval

_ONE_DAY = timedelta(days=1)


def window_bounds(as_of: date, window_days: int) -> Span:
    """Inclusive ``[as_of - window_days + 1, as_of]``."""
    return as_of - timedelta(days=window_days - 1), as_of


def merge_spans(spans: Iterable[Span]) -> list[Span]:
    """Merge overlapping or adjacent spans into a sorted list of disjoint spans."""
    merged: list[Span] = []
    for start, end in sorted(spans):
        if merged and start <= merged[-1][1] + _ONE_DAY:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def span_days(spans: Iterable[Span]) -> int:
    """Total inclusive days covered by disjoint spans."""
    return sum((end - start).days + 1 for start, end in spans)


def _as_interval(item: IntervalLike) -> DateInterval:
    return item.interval if isinstance(item, VisitInterval) else item


def _region(item: IntervalLike) -> str | None:
    return item.region if isinstance(item, VisitInterval) else None


def clipped_spans(
    intervals: Iterable[IntervalLike],
    start: date,
    end: date,
    *,
    as_of: date,
) -> dict[str | None, list[Span]]:
    """Clip intervals to ``[start, min(end, as_of)]`` and group them by region.

    Intervals starting after ``as_of`` are ignored; open intervals end at
    ``as_of``.
    """
    upper = min(end, as_of)
    groups: dict[str | None, list[Span]] = {}
    if start > upper:
        return groups

    for item in intervals:
        interval = _as_interval(item)
        if interval.start > as_of:
            continue
        clipped = interval.clip(start, upper, as_of)
        if clipped is None:
            continue
        groups.setdefault(_region(item), []).append((clipped.start, clipped.end))
    return groups


def days_in_range(
    intervals: Iterable[IntervalLike],
    start: date,
    end: date,
    *,
    as_of: date,
) -> int:
    """Days present within ``[start, end]``, counting no further than ``as_of``."""
    groups = clipped_spans(intervals, start, end, as_of=as_of)
    return sum(span_days(merge_spans(spans)) for spans in groups.values())


def days_in_window(intervals: Iterable[IntervalLike], as_of: date, window_days: int) -> int:
    """
    Days present in the ``window_days``-long window ending at ``as_of``.

    Args:
        intervals: Plain or tagged intervals; tagged ones are merged per region
        as_of: Last day of the window (inclusive)
        window_days: Window length; non-positive lengths count nothing

    Returns:
        Number of distinct days present in the window
    """
    if window_days <= 0:
        return 0
    window_start, window_end = window_bounds(as_of, window_days)
    return days_in_range(intervals, window_start, window_end, as_of=as_of)


def current_stay(intervals: Iterable[IntervalLike], as_of: date) -> DateInterval | None:
    """
    The stay containing ``as_of``, or the most recent one before it.

    Overlapping and adjacent records are merged first, so back-to-back
    records for the same trip form a single stay. A stay continuing past
    ``as_of`` is cut at ``as_of``.
    """
    spans = []
    for item in intervals:
        interval = _as_interval(item)
        if interval.start > as_of:
            continue
        spans.append((interval.start, min(interval.resolved_end(as_of), as_of)))

    merged = merge_spans(spans)
    if not merged:
        return None
    start, end = merged[-1]
    return DateInterval(start=start, end=end)
