"""
Tests for the promotion window calculator.
"""

from datetime import datetime, timezone

import pytest

from adslots.core.windows import (
    SECONDS_PER_DAY,
    PromotionWindow,
    days_to_seconds,
    first_window,
    next_window,
    parse_start_time,
    window_sequence,
)

APRIL_27_2020 = int(datetime(2020, 4, 27, tzinfo=timezone.utc).timestamp())


def utc(year, month, day) -> int:
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp())


class TestParseStartTime:
    @pytest.mark.parametrize("value", [
        "2020-04-27T00:00:00Z",
        "2020-04-27T00:00:00+0000",
        "2020-04-27T00:00:00+00:00",
        "2020-04-27T00:00:00",
    ])
    def test_iso_formats(self, value):
        assert parse_start_time(value) == APRIL_27_2020

    def test_offset_is_applied(self):
        assert parse_start_time("2020-04-27T02:00:00+02:00") == APRIL_27_2020

    def test_epoch_seconds_pass_through(self):
        assert parse_start_time(APRIL_27_2020) == APRIL_27_2020
        assert parse_start_time(str(APRIL_27_2020)) == APRIL_27_2020

    def test_naive_datetime_is_utc(self):
        assert parse_start_time(datetime(2020, 4, 27)) == APRIL_27_2020

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            parse_start_time("next tuesday")


class TestWindows:
    def test_first_window(self):
        window = first_window(APRIL_27_2020, days_to_seconds(5))
        assert window.start_time == APRIL_27_2020
        assert window.end_time == utc(2020, 5, 2)
        assert window.duration == 5 * SECONDS_PER_DAY

    def test_next_window_starts_after_gap(self):
        window = next_window(utc(2020, 5, 2), days_to_seconds(5), days_to_seconds(2))
        assert window.start_time == utc(2020, 5, 4)
        assert window.end_time == utc(2020, 5, 9)

    def test_zero_gap_windows_touch_without_overlap(self):
        window = next_window(1000, 100, 0)
        assert window.start_time == 1000
        assert window.end_time == 1100

    @pytest.mark.parametrize("validity", [0, -1, -SECONDS_PER_DAY])
    def test_non_positive_validity_rejected(self, validity):
        with pytest.raises(ValueError, match="must be positive"):
            next_window(1000, validity, 0)
        with pytest.raises(ValueError, match="must be positive"):
            first_window(1000, validity)

    def test_window_invariant(self):
        with pytest.raises(ValueError):
            PromotionWindow(10, 10)

    def test_datetimes_are_utc(self):
        window = first_window(APRIL_27_2020, 60)
        assert window.start_datetime == datetime(2020, 4, 27, tzinfo=timezone.utc)


class TestWindowSequence:
    @pytest.mark.parametrize("gap_days", [0, 1, 2, 7])
    def test_no_overlap(self, gap_days):
        gap = days_to_seconds(gap_days)
        windows = list(window_sequence(APRIL_27_2020, days_to_seconds(5), gap, 20))
        assert len(windows) == 20
        for previous, current in zip(windows, windows[1:]):
            assert current.start_time >= previous.end_time + gap
            assert current.start_time > previous.start_time

    def test_two_token_schedule(self):
        windows = list(window_sequence(APRIL_27_2020, days_to_seconds(5), days_to_seconds(2), 2))
        assert [(w.start_time, w.end_time) for w in windows] == [
            (utc(2020, 4, 27), utc(2020, 5, 2)),
            (utc(2020, 5, 4), utc(2020, 5, 9)),
        ]

    def test_empty_sequence(self):
        assert list(window_sequence(APRIL_27_2020, 100, 0, 0)) == []
