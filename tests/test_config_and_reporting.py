from datetime import datetime, timedelta

import pytest

from logout_calculator.config import (
    CalculatorSettings,
    coerce_break_minutes,
    coerce_work_hours,
)
from logout_calculator.reporting import (
    ResultPrinter,
    breakdown_lines,
    format_break,
    format_break_clock,
    format_hours,
    format_progress,
    format_remaining,
)
from logout_calculator.schedule import calculate_manual, derive_alternating, project_from_timestamps

DAY = datetime(2024, 3, 1)


@pytest.mark.parametrize(
    "value, expected",
    [(None, 6.0), ("", 6.0), ("abc", 6.0), ("0", 6.0), ("-2", 6.0), ("nan", 6.0), ("7.5", 7.5), (8, 8.0)],
)
def test_coerce_work_hours(value, expected):
    assert coerce_work_hours(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(None, 0), ("", 0), ("x", 0), ("-5", 0), ("15.7", 15), (20, 20)],
)
def test_coerce_break_minutes(value, expected):
    assert coerce_break_minutes(value) == expected


def test_settings_from_inputs():
    settings = CalculatorSettings.from_inputs(work_hours="7", break_minutes="45", refresh_seconds=10)
    assert settings.required_work_minutes == 420
    assert settings.break_minutes == 45
    assert settings.refresh_interval == timedelta(seconds=10)
    assert settings.min_gap_minutes == 5.0


def test_duration_labels():
    assert format_hours(330) == "5.5 hours"
    assert format_break(90) == "1h 30m"
    assert format_break(45) == "45 mins"
    assert format_break_clock(75) == "01:15"
    assert format_break_clock(0) == "00:00"
    assert format_progress(41.6) == "Work progress: 42%"


def test_remaining_label():
    done = calculate_manual("09:00", now=DAY.replace(hour=16))
    assert format_remaining(done) == "Work Complete!"
    later = calculate_manual("09:00", now=DAY.replace(hour=10, minute=15))
    assert format_remaining(later) == "4h 45m"
    close = calculate_manual("09:00", now=DAY.replace(hour=14, minute=20))
    assert format_remaining(close) == "40m"


def _full_day():
    instants = [DAY.replace(hour=h, minute=m) for h, m in [(9, 0), (12, 0), (12, 30), (15, 0)]]
    breakdown = derive_alternating(instants, now=DAY.replace(hour=16))
    return project_from_timestamps(breakdown, instants[0], 6, DAY.replace(hour=16))


def test_breakdown_lines_interleave_by_start():
    result = _full_day()
    assert breakdown_lines(result.work_periods, result.breaks) == [
        ("Work Period 1: 09:00 - 12:00", "180 min"),
        ("Break 1: 12:00 - 12:30", "30 min"),
        ("Work Period 2: 12:30 - 15:00", "150 min"),
        ("Break 2: 15:00 - 16:00 (ongoing)", "60 min"),
    ]


def test_result_printer(capsys):
    ResultPrinter().print_result(_full_day())
    out = capsys.readouterr().out
    assert "Logout time:      16:30" in out
    assert "Active work:      5.5 hours" in out
    assert "Breaks:           1h 30m (2)" in out
    assert "Time remaining:   30m" in out
    assert "Work progress: 92%" in out
    assert "Break 2: 15:00 - 16:00 (ongoing)" in out


def test_history_printer_empty(capsys):
    ResultPrinter().print_history([])
    assert "No work logs found" in capsys.readouterr().out


@pytest.mark.parametrize(
    "work_hours, break_minutes",
    [("1e9", None), (None, "1e12"), ("1e9", "1e12")],
)
def test_manual_values_past_the_calendar_fall_back_to_defaults(work_hours, break_minutes):
    now = DAY.replace(hour=12)
    result = calculate_manual("09:00", work_hours=work_hours, break_minutes=break_minutes, now=now)
    assert result.projected_logout == DAY.replace(hour=15)
    assert result.total_break_minutes == 0
    assert result.progress_percent == pytest.approx(50)
