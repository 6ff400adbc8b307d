from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class BoxModel(BaseModel):
    x: float
    y: float
    width: float
    height: float


class PersonModel(BaseModel):
    id: str
    box: BoxModel
    confidence: float
    student_id: Optional[str] = None
    student_name: Optional[str] = None


class AlertModel(BaseModel):
    id: str
    person_id: str
    type: str = Field(..., description="Behavior type code, e.g. phone_detected")
    label: str
    confidence: float
    timestamp_ms: float
    description: str
    student_id: Optional[str] = None
    student_name: Optional[str] = None


class StatsResponse(BaseModel):
    total_detected: int
    suspicious_count: int
    last_updated_ms: float
    fps: int


class SessionModel(BaseModel):
    id: str
    start_ms: float
    end_ms: Optional[float] = None
    room_name: Optional[str] = None
    total_alerts: int
    peak_person_count: int
    duration_s: float


class ModelStatus(BaseModel):
    loaded: bool
    progress: int = Field(..., description="Coarse load progress 0-100")
    error: Optional[str] = None


class StatusResponse(BaseModel):
    """
    Compact status for dashboard polling.
    """
    running: bool = Field(..., description="True if the scheduler is active and the model is loaded")
    model: ModelStatus
    stats: StatsResponse
    active_alerts: int
    tracked_ids: int
    consecutive_failures: int
    session: Optional[SessionModel] = None


class DismissResponse(BaseModel):
    dismissed: str


class ClearResponse(BaseModel):
    cleared: int


class AlertsResponse(BaseModel):
    alerts: List[AlertModel]
