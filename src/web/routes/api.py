from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Request

from ..api_models import (
    AlertModel,
    AlertsResponse,
    ClearResponse,
    DismissResponse,
    PersonModel,
    SessionModel,
    StatsResponse,
    StatusResponse,
)

router = APIRouter()


def _ctx(request: Request):
    return request.app.state.ctx


def _now_ms(request: Request) -> float:
    return request.app.state.clock()


def _model_status(request: Request) -> dict:
    loader = getattr(request.app.state, "loader", None)
    if loader is None:
        return {"loaded": False, "progress": 0, "error": None}
    return loader.status()


@router.get("/status", response_model=StatusResponse)
def status(request: Request):
    """
    Aggregate status for the UI.
    Fields:
    - running: scheduler active and model loaded
    - model: {loaded, progress, error}
    - stats: latest frame stats (persons, events this frame, fps)
    - active_alerts / tracked_ids / consecutive_failures
    - session: current monitoring session summary, if any
    """
    ctx = _ctx(request)
    model = _model_status(request)
    scheduler = getattr(request.app.state, "scheduler", None)
    active = bool(scheduler is not None and scheduler.is_active)
    session = ctx.session()

    return {
        "running": active and model["loaded"],
        "model": model,
        "stats": ctx.stats().to_dict(),
        "active_alerts": len(ctx.alerts),
        "tracked_ids": len(ctx.tracker),
        "consecutive_failures": ctx.consecutive_failures,
        "session": session.to_dict(_now_ms(request)) if session is not None else None,
    }


@router.get("/persons", response_model=List[PersonModel])
def persons(request: Request):
    return [p.to_dict() for p in _ctx(request).persons()]


@router.get("/stats", response_model=StatsResponse)
def stats(request: Request):
    return _ctx(request).stats().to_dict()


@router.get("/alerts", response_model=AlertsResponse)
def alerts(request: Request):
    """Alert set, newest first."""
    return {"alerts": [AlertModel(**a) for a in _ctx(request).alerts.to_list()]}


@router.delete("/alerts/{event_id}", response_model=DismissResponse)
def dismiss_alert(event_id: str, request: Request):
    if not _ctx(request).alerts.dismiss(event_id):
        raise HTTPException(status_code=404, detail=f"Alert not found: {event_id}")
    return {"dismissed": event_id}


@router.delete("/alerts", response_model=ClearResponse)
def clear_alerts(request: Request):
    ctx = _ctx(request)
    count = len(ctx.alerts)
    ctx.alerts.clear_all()
    return {"cleared": count}


@router.post("/session/reset", response_model=SessionModel)
def reset_session(request: Request):
    """Close the current monitoring session and start a new one."""
    now = _now_ms(request)
    session = _ctx(request).start_session(now)
    return session.to_dict(now)
