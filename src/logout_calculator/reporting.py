"""Formatting helpers for CLI output and saved history rows."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from .models import BREAK, HistoryEntry, Period, ScheduleResult
from .schedule import round_half_up


class ResultPrinter:
    """Render a schedule result in the console."""

    def __init__(self, show_breakdown: bool = True) -> None:
        self.show_breakdown = show_breakdown

    def print_result(self, result: ScheduleResult) -> None:
        print(f"Logout time:      {format_clock(result.projected_logout)}")
        print("-" * 40)
        print(f"Active work:      {format_hours(result.active_minutes)}")
        print(f"Breaks:           {format_break(result.total_break_minutes)} ({result.break_count})")
        print(f"Time remaining:   {format_remaining(result)}")
        print(f"Office time:      {format_hours(result.total_office_minutes)}")
        print(format_progress(result.progress_percent))

        if self.show_breakdown and result.work_periods:
            print()
            print("Breakdown:")
            for label, minutes in breakdown_lines(result.work_periods, result.breaks):
                print(f"  {label:<40} {minutes}")

    def print_history(self, entries: Iterable[HistoryEntry]) -> None:
        entries = list(entries)
        if not entries:
            print("No work logs found. Your history will appear here once saved.")
            return
        print(f"{'ID':>5}  {'Date':<12} {'Active':>7} {'Break':>6} {'Logout':>7}")
        for entry in entries:
            print(
                f"{entry.id:>5}  {entry.date_label:<12} {entry.active_hours + 'h':>7} "
                f"{format_break_clock(entry.break_minutes):>6} {entry.logout_time:>7}"
            )


def format_clock(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def format_hours(minutes: float) -> str:
    return f"{minutes / 60:.1f} hours"


def format_break(minutes: float) -> str:
    hours, mins = divmod(minutes, 60)
    if hours >= 1:
        return f"{int(hours)}h {round_half_up(mins)}m"
    return f"{round_half_up(mins)} mins"


def format_remaining(result: ScheduleResult) -> str:
    if result.is_complete:
        return "Work Complete!"
    hours, mins = divmod(result.remaining_minutes, 60)
    if hours >= 1:
        return f"{int(hours)}h {round_half_up(mins)}m"
    return f"{round_half_up(mins)}m"


def format_progress(percent: float) -> str:
    return f"Work progress: {round_half_up(percent)}%"


def format_break_clock(minutes: float) -> str:
    """Render a break total as ``HH:MM`` for the history table."""
    hours, mins = divmod(minutes, 60)
    return f"{int(hours):02d}:{round_half_up(mins):02d}"


def breakdown_lines(
    work_periods: Iterable[Period], breaks: Iterable[Period]
) -> list[tuple[str, str]]:
    """Interleave work periods and breaks by start time into labelled rows."""
    numbered: list[tuple[int, Period]] = []
    numbered.extend(enumerate(work_periods, start=1))
    numbered.extend(enumerate(breaks, start=1))
    numbered.sort(key=lambda item: item[1].start)

    lines: list[tuple[str, str]] = []
    for index, period in numbered:
        span = f"{format_clock(period.start)} - {format_clock(period.end)}"
        if period.kind == BREAK:
            label = f"Break {index}: {span}"
            if period.ongoing:
                label += " (ongoing)"
        else:
            label = f"Work Period {index}: {span}"
        lines.append((label, f"{round_half_up(period.duration_minutes)} min"))
    return lines
