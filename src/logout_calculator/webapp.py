"""FastAPI application that exposes the logout calculator and saved history."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import CalculatorSettings
from .db import (
    clear_history,
    database_connection,
    delete_history_entry,
    fetch_history,
    save_history_entry,
)
from .models import HistoryEntry, Period, ScheduleResult
from .paths import get_db_path
from .reporting import breakdown_lines, format_clock, format_remaining
from .schedule import ALTERNATING, GAPS, NoTimestampsError, calculate

logger = logging.getLogger(__name__)


class CalculationRequest(BaseModel):
    text: Optional[str] = None
    login_time: Optional[str] = None
    work_hours: Optional[Union[float, str]] = None
    break_minutes: Optional[Union[int, float, str]] = None
    pairing: str = ALTERNATING
    min_gap_minutes: Optional[float] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_db_path = Path(db_path or get_db_path())
    defaults = CalculatorSettings()

    app = FastAPI(title="Logout Calculator", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    def _run(payload: CalculationRequest) -> Optional[ScheduleResult]:
        if payload.pairing not in (ALTERNATING, GAPS):
            raise HTTPException(status_code=400, detail=f"Unknown pairing: {payload.pairing}")
        settings = CalculatorSettings.from_inputs(
            work_hours=payload.work_hours,
            break_minutes=payload.break_minutes,
            min_gap_minutes=payload.min_gap_minutes,
        )
        try:
            return calculate(
                text=payload.text,
                login_time=payload.login_time,
                settings=settings,
                now=clock(),
                pairing=payload.pairing,
            )
        except NoTimestampsError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        return {
            "database_path": str(request.app.state.db_path),
            "default_work_hours": defaults.required_work_hours,
            "default_break_minutes": defaults.break_minutes,
            "refresh_seconds": defaults.refresh_interval.total_seconds(),
        }

    @app.post("/api/calculate")
    def calculate_endpoint(payload: CalculationRequest) -> Dict[str, Any]:
        result = _run(payload)
        return {"result": _result_to_payload(result) if result else None}

    @app.get("/api/history")
    def list_history(request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            entries = fetch_history(conn)
        return {"entries": [_entry_to_payload(entry) for entry in entries]}

    @app.post("/api/history")
    def save_history(payload: CalculationRequest, request: Request) -> Dict[str, Any]:
        result = _run(payload)
        if result is None:
            raise HTTPException(status_code=400, detail="Nothing to save; enter a login time.")
        with database_connection(request.app.state.db_path) as conn:
            entry = save_history_entry(conn, result)
        logger.info("Saved history entry %s for %s", entry.id, entry.date_label)
        return {"entry": _entry_to_payload(entry)}

    @app.delete("/api/history/{entry_id}")
    def delete_history(entry_id: int, request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            try:
                delete_history_entry(conn, entry_id)
            except ValueError as exc:
                raise HTTPException(status_code=404, detail="History entry not found") from exc
        return {"deleted": entry_id}

    @app.delete("/api/history")
    def clear_history_endpoint(request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            removed = clear_history(conn)
        return {"deleted": removed}

    return app


def _period_to_payload(period: Period) -> Dict[str, Any]:
    return {
        "kind": period.kind,
        "start": period.start.isoformat(),
        "end": period.end.isoformat(),
        "minutes": period.duration_minutes,
        "ongoing": period.ongoing,
    }


def _result_to_payload(result: ScheduleResult) -> Dict[str, Any]:
    return {
        "mode": result.mode,
        "login": result.login.isoformat(),
        "now": result.now.isoformat(),
        "logout_time": format_clock(result.projected_logout),
        "projected_logout": result.projected_logout.isoformat(),
        "active_minutes": result.active_minutes,
        "break_minutes": result.total_break_minutes,
        "break_count": result.break_count,
        "remaining_minutes": result.remaining_minutes,
        "remaining_label": format_remaining(result),
        "total_office_minutes": result.total_office_minutes,
        "progress_percent": result.progress_percent,
        "is_complete": result.is_complete,
        "work_periods": [_period_to_payload(period) for period in result.work_periods],
        "breaks": [_period_to_payload(period) for period in result.breaks],
        "breakdown": [
            {"label": label, "value": value}
            for label, value in breakdown_lines(result.work_periods, result.breaks)
        ],
    }


def _entry_to_payload(entry: HistoryEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "date": entry.date_label,
        "active_hours": entry.active_hours,
        "break_minutes": entry.break_minutes,
        "logout_time": entry.logout_time,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }
