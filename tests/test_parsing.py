from datetime import datetime

import pytest

from logout_calculator.parsing import (
    extract_timestamps,
    parse_date_token,
    parse_time_token,
    resolve_month,
)

PORTAL_EXPORT = """
11:01:55 am
03 Feb 2026
KGIT database new
Info
12:49:32 pm
03 Feb 2026
"""


def test_blank_input_yields_nothing():
    assert extract_timestamps("") == []
    assert extract_timestamps("   \n\t\n") == []


def test_time_followed_by_date_then_trailing_time():
    text = "09:00:00\n01 Mar 2024\n12:30:00 pm"
    assert extract_timestamps(text) == [
        datetime(2024, 3, 1, 9, 0, 0),
        datetime(2024, 3, 1, 12, 30, 0),
    ]


def test_labels_between_pairs_are_ignored():
    assert extract_timestamps(PORTAL_EXPORT) == [
        datetime(2026, 2, 3, 11, 1, 55),
        datetime(2026, 2, 3, 12, 49, 32),
    ]


@pytest.mark.parametrize(
    "line, hour",
    [
        ("12:15:00 am", 0),
        ("12:15:00 pm", 12),
        ("03:15:00 pm", 15),
        ("03:15:00", 3),
        ("03:15:00PM", 15),
        ("13:45:00 pm", 13),
    ],
)
def test_meridiem_normalization(line, hour):
    token = parse_time_token(line)
    assert token is not None
    assert token.hour == hour


def test_time_token_keeps_meridiem_lowercased():
    token = parse_time_token("Login 7:05:09 AM")
    assert (token.hour, token.minute, token.second, token.meridiem) == (7, 5, 9, "am")


def test_line_without_time():
    assert parse_time_token("KGIT database new") is None


@pytest.mark.parametrize("name", ["Feb", "feb", "FEBRUARY", "February"])
def test_month_lookup_accepts_short_and_full_names(name):
    assert resolve_month(name) == 2


def test_month_lookup_rejects_partial_names():
    assert resolve_month("Febr") is None
    assert parse_date_token("03 Febr 2026") is None


def test_unknown_month_drops_that_timestamp():
    text = "09:00:00\n03 Febr 2026\n10:00:00\n03 Feb 2026"
    assert extract_timestamps(text) == [datetime(2026, 2, 3, 10, 0, 0)]


def test_date_token_fields():
    token = parse_date_token("Date: 7 september 2025 (Sun)")
    assert (token.day, token.month, token.year) == (7, 9, 2025)


def test_trailing_time_without_context_is_dropped():
    assert extract_timestamps("label\n10:00:00") == []


def test_undated_time_in_the_middle_is_dropped():
    text = "09:00:00\n01 Mar 2024\n10:00:00\nlabel\n11:00:00\n01 Mar 2024"
    assert extract_timestamps(text) == [
        datetime(2024, 3, 1, 9, 0, 0),
        datetime(2024, 3, 1, 11, 0, 0),
    ]


def test_context_follows_latest_date_line():
    text = "23:30:00\n01 Mar 2024\n08:00:00\n02 Mar 2024\n09:15:00"
    assert extract_timestamps(text) == [
        datetime(2024, 3, 1, 23, 30, 0),
        datetime(2024, 3, 2, 8, 0, 0),
        datetime(2024, 3, 2, 9, 15, 0),
    ]


def test_output_is_sorted():
    text = "05:00:00 pm\n01 Mar 2024\n09:00:00 am\n01 Mar 2024\n01:00:00 pm\n01 Mar 2024"
    result = extract_timestamps(text)
    assert result == sorted(result)
    assert [moment.hour for moment in result] == [9, 13, 17]


def test_day_past_month_end_rolls_over():
    assert extract_timestamps("10:00:00\n31 Apr 2024") == [datetime(2024, 5, 1, 10, 0, 0)]


def test_date_outside_calendar_drops_only_that_pair():
    text = "09:00:00\n01 Mar 0000\n10:00:00\n01 Mar 2024"
    assert extract_timestamps(text) == [datetime(2024, 3, 1, 10, 0, 0)]


def test_rollover_past_year_9999_is_dropped():
    text = "23:30:00\n32 Dec 9999\n08:00:00\n02 Jan 2024\n99:00:00"
    assert extract_timestamps(text) == [
        datetime(2024, 1, 2, 8, 0, 0),
        datetime(2024, 1, 6, 3, 0, 0),
    ]
