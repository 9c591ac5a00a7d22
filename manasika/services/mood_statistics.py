"""
Mood statistics: aggregate metrics, trend classification, streaks, chart series,
distribution and trigger-word extraction.

Every function here is pure. Each takes a snapshot of entries (and, where the
wall-clock matters, an optional ``today``) and returns a new value without
touching the store it came from.
"""

import re
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.core import (MAX_MOOD, MIN_MOOD, MOOD_COLORS, MOOD_EMOJIS, MOOD_LABELS, TREND_DECLINING, TREND_IMPROVING,
                           TREND_STABLE, ChartDataPoint, MoodEntry, MoodStats)
from ..utils.timestamp_utils import format_chart_label
from ..utils.timestamp_utils import today as current_day

TREND_WINDOW_DAYS = 7
TREND_THRESHOLD = 0.2
STREAK_MIN_MOOD = 4
TRIGGER_MAX_MOOD = 2
TOP_TRIGGERS = 5

TRIGGER_WORDS = ('work', 'stress', 'tired', 'anxious', 'worried', 'overwhelmed', 'sad', 'angry', 'frustrated', 'lonely',
                 'sleep', 'health')

_TOKEN_SPLIT = re.compile(r'\W+')


def _round1(value: float) -> float:
    # half-up on the exact binary value, like Number.toFixed(1)
    return float(Decimal(value).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def _mean(entries: Sequence[MoodEntry]) -> float:
    return sum(entry.mood for entry in entries) / len(entries)


def calculate_average(entries: Sequence[MoodEntry]) -> float:
    """Mean mood rounded to one decimal; 0 when there are no entries (not a mood value)."""
    if not entries:
        return 0
    return _round1(_mean(entries))


def calculate_trend(entries: Sequence[MoodEntry], today: Optional[date] = None) -> str:
    """Compare the last 7 days with the 7 days before them.

    Args:
        entries: Entry snapshot
        today: Reference day, the wall-clock date if None

    Returns:
        ``improving`` / ``declining`` when the means differ by more than 0.2,
        ``stable`` otherwise or when either week has no entries
    """
    today = today or current_day()
    week_start = today - timedelta(days=TREND_WINDOW_DAYS)
    previous_start = today - timedelta(days=2 * TREND_WINDOW_DAYS)

    recent = [e for e in entries if e.date >= week_start]
    previous = [e for e in entries if previous_start <= e.date < week_start]

    if not recent or not previous:
        return TREND_STABLE

    difference = _mean(recent) - _mean(previous)
    if difference > TREND_THRESHOLD:
        return TREND_IMPROVING
    if difference < -TREND_THRESHOLD:
        return TREND_DECLINING
    return TREND_STABLE


def calculate_streak(entries: Iterable[MoodEntry]) -> int:
    """Count entries with mood >= 4 walking back from the most recent date.

    Same-date entries keep their incoming order (the sort is stable).
    """
    streak = 0
    for entry in sorted(entries, key=lambda e: e.date, reverse=True):
        if entry.mood < STREAK_MIN_MOOD:
            break
        streak += 1
    return streak


def calculate_mood_stats(entries: Sequence[MoodEntry], today: Optional[date] = None) -> MoodStats:
    """Derive the aggregate stats shown on the dashboard.

    Args:
        entries: Entry snapshot in any order
        today: Reference day for the trend, the wall-clock date if None

    Returns:
        MoodStats; an empty collection yields (0, 0, stable, 0)
    """
    if not entries:
        return MoodStats(average_mood=0, total_entries=0, mood_trend=TREND_STABLE, streak=0)

    return MoodStats(average_mood=calculate_average(entries),
                     total_entries=len(entries),
                     mood_trend=calculate_trend(entries, today),
                     streak=calculate_streak(entries))


def get_mood_chart_data(entries: Sequence[MoodEntry], days: int = 7, today: Optional[date] = None) -> List[ChartDataPoint]:
    """Build one chart point per calendar day of a window ending today.

    Args:
        entries: Entry snapshot
        days: Window length; the series always has exactly this many points
        today: Last day of the window, the wall-clock date if None

    Returns:
        Points oldest first; days without an entry get value 0

    Raises:
        ValueError: If days is smaller than 1
    """
    if days < 1:
        raise ValueError(f'Chart window must cover at least one day, got {days}')

    today = today or current_day()
    by_date: Dict[date, int] = {}
    for entry in entries:
        # first match wins, as a linear search would
        by_date.setdefault(entry.date, entry.mood)

    points = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(ChartDataPoint(label=format_chart_label(day), value=by_date.get(day, 0), date=day.isoformat()))
    return points


def get_mood_distribution(entries: Iterable[MoodEntry]) -> Dict[int, int]:
    """Count entries per mood level; all five levels are always present."""
    distribution = {level: 0 for level in range(MIN_MOOD, MAX_MOOD + 1)}
    for entry in entries:
        distribution[entry.mood] = distribution.get(entry.mood, 0) + 1
    return distribution


def get_top_mood_triggers(entries: Iterable[MoodEntry], limit: int = TOP_TRIGGERS) -> List[str]:
    """Most frequent wellness keywords in the notes of low-mood entries.

    Only entries with mood <= 2 and a non-empty note are considered. Notes are
    lower-cased and split on non-word characters. Ties keep first-seen order.

    Args:
        entries: Entry snapshot
        limit: Maximum number of triggers returned

    Returns:
        Trigger words ordered by descending count
    """
    counts: Dict[str, int] = {}
    for entry in entries:
        if entry.mood > TRIGGER_MAX_MOOD or not entry.note:
            continue
        for word in _TOKEN_SPLIT.split(entry.note.lower()):
            if word in TRIGGER_WORDS:
                counts[word] = counts.get(word, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [word for word, _ in ranked[:limit]]


def get_mood_message(average_mood: float) -> str:
    """Encouragement line for the dashboard based on the average mood."""
    if average_mood >= 4.5:
        return "You're doing amazing! Keep up the great work! 🌟"
    if average_mood >= 3.5:
        return "You're on a positive track! 🌱"
    if average_mood >= 2.5:
        return 'Some ups and downs - that\'s completely normal. 💙'
    if average_mood >= 1.5:
        return "Going through a tough time? Remember, it's okay to seek support. 🤗"
    return "You're being so brave by tracking your feelings. Every small step counts. 💪"


def get_mood_label(mood: int) -> str:
    return MOOD_LABELS.get(mood, 'Unknown')


def get_mood_emoji(mood: int) -> str:
    return MOOD_EMOJIS.get(mood, '')


def get_mood_color(mood: int) -> str:
    return MOOD_COLORS.get(mood, '#777')
