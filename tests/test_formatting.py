from datetime import timedelta

import pytest

from drakn.formatting import human_duration


def _parse(text):
    total = 0
    for part in text.split(":"):
        total = total * 60 + int(part)
    return total


def test_zero_is_minutes_and_seconds():
    assert human_duration(0) == "00:00"


def test_hours_shown_automatically():
    assert human_duration(3661) == "01:01:01"


def test_hours_forced():
    assert human_duration(59, True) == "00:00:59"


@pytest.mark.parametrize("value", [0, 1, 59, 60, 61, 599, 3599, 3600, 7322, 86399, 90061])
def test_round_trip(value):
    text = human_duration(value)
    assert _parse(text) == value
    assert all(len(part) >= 2 for part in text.split(":"))


@pytest.mark.parametrize("value", [0, 42, 3599])
def test_part_count_depends_on_hours(value):
    assert len(human_duration(value).split(":")) == 2
    assert len(human_duration(value, True).split(":")) == 3


def test_fractions_are_truncated():
    assert human_duration(59.99) == human_duration(59)
    assert human_duration(3600.5, True) == human_duration(3600, True)


def test_timedelta_matches_seconds():
    assert human_duration(timedelta(minutes=5, seconds=7)) == human_duration(307)


def test_negative_rejected():
    with pytest.raises(ValueError):
        human_duration(-1)