"""
BehaviorEvent model for suspicious behavior inferences.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .person import TrackedPerson


class BehaviorType(str, Enum):
    """Behavior taxonomy. LOOKING_AWAY and SUSPICIOUS_HAND_MOVEMENT are reserved."""
    PHONE_DETECTED = "phone_detected"
    LOOKING_DOWN = "looking_down"
    SUSPICIOUS_HAND_MOVEMENT = "suspicious_hand_movement"
    HEAD_MOVEMENT = "head_movement"
    LOOKING_AWAY = "looking_away"

    @property
    def label(self) -> str:
        return BEHAVIOR_LABELS[self]

    @property
    def description(self) -> str:
        return BEHAVIOR_DESCRIPTIONS[self]


BEHAVIOR_LABELS: Dict[BehaviorType, str] = {
    BehaviorType.PHONE_DETECTED: "Phone Detected",
    BehaviorType.LOOKING_DOWN: "Looking Down",
    BehaviorType.SUSPICIOUS_HAND_MOVEMENT: "Hand Movement",
    BehaviorType.HEAD_MOVEMENT: "Head Movement",
    BehaviorType.LOOKING_AWAY: "Looking Away",
}

BEHAVIOR_DESCRIPTIONS: Dict[BehaviorType, str] = {
    BehaviorType.PHONE_DETECTED: "Mobile phone detected near student",
    BehaviorType.LOOKING_DOWN: "Student appears to be looking down frequently",
    BehaviorType.SUSPICIOUS_HAND_MOVEMENT: "Suspicious hand movement detected",
    BehaviorType.HEAD_MOVEMENT: "Rapid head or body movement detected",
    BehaviorType.LOOKING_AWAY: "Student appears to be looking away",
}


def new_event_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class BehaviorEvent:
    """
    A discrete, timestamped inference about one tracked person.

    Attributes:
        person_id: ID of the TrackedPerson the event is attached to.
        type: Behavior type.
        confidence: Event confidence (0-1).
        timestamp_ms: Pipeline clock time (ms) when the event was emitted.
        description: Human-readable description.
        id: Unique event identifier.
        student_id: Copied from the person, if known.
        student_name: Copied from the person, if known.
    """
    person_id: str
    type: BehaviorType
    confidence: float
    timestamp_ms: float
    description: str = ""
    id: str = field(default_factory=new_event_id)
    student_id: Optional[str] = None
    student_name: Optional[str] = None

    @classmethod
    def for_person(
        cls,
        person: TrackedPerson,
        behavior: BehaviorType,
        confidence: float,
        timestamp_ms: float,
    ) -> "BehaviorEvent":
        """Create an event attached to a person, using the type's default description."""
        return cls(
            person_id=person.id,
            type=behavior,
            confidence=confidence,
            timestamp_ms=timestamp_ms,
            description=behavior.description,
            student_id=person.student_id,
            student_name=person.student_name,
        )

    @property
    def dedup_key(self) -> tuple:
        return (self.person_id, self.type)

    def age_ms(self, now_ms: float) -> float:
        return now_ms - self.timestamp_ms

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "person_id": self.person_id,
            "type": self.type.value,
            "label": self.type.label,
            "confidence": self.confidence,
            "timestamp_ms": self.timestamp_ms,
            "description": self.description,
            "student_id": self.student_id,
            "student_name": self.student_name,
        }
