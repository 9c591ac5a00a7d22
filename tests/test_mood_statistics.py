from datetime import timedelta

import pytest

from conftest import TODAY, make_entry
from manasika.models.core import MoodStats
from manasika.services.mood_statistics import (calculate_average, calculate_mood_stats, calculate_streak,
                                               calculate_trend, get_mood_chart_data, get_mood_color,
                                               get_mood_distribution, get_mood_label, get_mood_message,
                                               get_top_mood_triggers)


def test_empty_collection_stats():
    assert calculate_mood_stats([], TODAY) == MoodStats(average_mood=0, total_entries=0, mood_trend='stable', streak=0)


def test_average_of_full_scale():
    entries = [make_entry(mood, days_ago=i) for i, mood in enumerate([1, 2, 3, 4, 5])]
    assert calculate_average(entries) == 3.0


def test_average_rounds_to_one_decimal_half_up():
    entries = [make_entry(3, 0), make_entry(3, 1), make_entry(4, 2), make_entry(3, 3)]
    # 3.25 -> 3.3
    assert calculate_average(entries) == 3.3
    assert calculate_average([make_entry(4, 0), make_entry(4, 1), make_entry(5, 2)]) == 4.3
    # 43/20 and 63/20 sit just below .x5 in binary
    assert calculate_average([make_entry(3, i) for i in range(3)] + [make_entry(2, i) for i in range(3, 20)]) == 2.1
    assert calculate_average([make_entry(4, i) for i in range(3)] + [make_entry(3, i) for i in range(3, 20)]) == 3.1


def test_trend_improving():
    entries = [make_entry(4, 0), make_entry(4, 1), make_entry(3, 8), make_entry(4, 9)]
    assert calculate_trend(entries, TODAY) == 'improving'


def test_trend_declining():
    entries = [make_entry(3, 0), make_entry(4, 1), make_entry(4, 8), make_entry(4, 9)]
    assert calculate_trend(entries, TODAY) == 'declining'


def test_trend_small_difference_is_stable():
    recent = [make_entry(m, i) for i, m in enumerate([4, 4, 4, 3, 3])]
    previous = [make_entry(3, 8), make_entry(4, 9)]
    assert calculate_trend(recent + previous, TODAY) == 'stable'


def test_trend_stable_when_a_week_is_empty():
    assert calculate_trend([make_entry(5, 0), make_entry(5, 1)], TODAY) == 'stable'
    assert calculate_trend([make_entry(1, 8), make_entry(1, 10)], TODAY) == 'stable'


def test_trend_window_boundaries():
    # day 7 belongs to the recent week, day 14 to the previous one, day 15 to neither
    entries = [make_entry(5, 7), make_entry(1, 14), make_entry(5, 15)]
    assert calculate_trend(entries, TODAY) == 'improving'


def test_trend_uses_reference_day():
    entries = [make_entry(5, 0), make_entry(1, 8)]
    assert calculate_trend(entries, TODAY) == 'improving'
    assert calculate_trend(entries, TODAY + timedelta(days=30)) == 'stable'


def test_streak_stops_at_first_low_day():
    moods_by_recency = [5, 5, 4, 2, 5]
    entries = [make_entry(mood, days_ago=i) for i, mood in enumerate(moods_by_recency)]
    # insertion order must not matter
    entries.reverse()
    assert calculate_streak(entries) == 3


def test_streak_counts_whole_collection_when_all_positive():
    assert calculate_streak([make_entry(4, 0), make_entry(5, 1)]) == 2
    assert calculate_streak([make_entry(3, 0), make_entry(5, 1)]) == 0


def test_stats_combines_metrics():
    entries = [make_entry(5, 0), make_entry(4, 1), make_entry(2, 2)]
    stats = calculate_mood_stats(entries, TODAY)
    assert stats.average_mood == 3.7
    assert stats.total_entries == 3
    assert stats.streak == 2
    assert stats.to_dict() == {'averageMood': 3.7, 'totalEntries': 3, 'moodTrend': 'stable', 'streak': 2}


def test_chart_fills_missing_days_with_zero():
    entries = [make_entry(4, days_ago=2), make_entry(5, days_ago=0)]
    points = get_mood_chart_data(entries, days=3, today=TODAY)

    assert [p.value for p in points] == [4, 0, 5]
    assert [p.date for p in points] == ['2026-10-17', '2026-10-18', '2026-10-19']
    assert points[-1].label == 'Mon, Oct 19'


@pytest.mark.parametrize('days', [1, 7, 30])
def test_chart_length_matches_window(days):
    points = get_mood_chart_data([make_entry(3, 100)], days=days, today=TODAY)
    assert len(points) == days
    assert all(p.value == 0 for p in points)


def test_chart_uses_first_entry_for_a_day():
    entries = [make_entry(2, 0, entry_id='a'), make_entry(5, 0, entry_id='b')]
    assert get_mood_chart_data(entries, days=1, today=TODAY)[0].value == 2


def test_chart_rejects_empty_window():
    with pytest.raises(ValueError):
        get_mood_chart_data([], days=0, today=TODAY)


def test_distribution_always_has_five_levels():
    assert get_mood_distribution([]) == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    entries = [make_entry(5, 0), make_entry(5, 1), make_entry(2, 2)]
    assert get_mood_distribution(entries) == {1: 0, 2: 1, 3: 0, 4: 0, 5: 2}


def test_triggers_ranked_by_frequency():
    entries = [make_entry(1, 0, note='so tired from work'), make_entry(2, 1, note='work stress again')]
    assert get_top_mood_triggers(entries) == ['work', 'tired', 'stress']


def test_triggers_ignore_good_days_and_empty_notes():
    entries = [
        make_entry(3, 0, note='work work work'),
        make_entry(1, 1, note=''),
        make_entry(2, 2, note='Lonely, SAD... and tired!'),
    ]
    assert get_top_mood_triggers(entries) == ['lonely', 'sad', 'tired']


def test_triggers_only_match_whole_words():
    assert get_top_mood_triggers([make_entry(1, 0, note='workout and sleepy')]) == []


def test_triggers_capped_at_five():
    note = 'work stress tired anxious worried overwhelmed sad'
    assert len(get_top_mood_triggers([make_entry(1, 0, note=note)])) == 5


def test_mood_message_tiers():
    assert 'amazing' in get_mood_message(4.6)
    assert 'positive track' in get_mood_message(3.5)
    assert 'ups and downs' in get_mood_message(2.5)
    assert 'tough time' in get_mood_message(1.5)
    assert 'brave' in get_mood_message(0)


def test_label_and_color_lookup():
    assert get_mood_label(1) == 'Very Low'
    assert get_mood_label(5) == 'Very High'
    assert get_mood_color(3) == '#ffa502'
    assert get_mood_color(9) == '#777'
