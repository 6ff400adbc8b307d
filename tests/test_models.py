"""
Smoke tests for typed models and adapters.
"""

import numpy as np
import pytest

from models.frame import FrameData
from models.detection import BoundingBox, RawDetection
from models.person import TrackedPerson
from models.behavior import BehaviorEvent, BehaviorType
from models.stats import DetectionStats, MonitoringSession


class TestBoundingBox:
    def test_center(self):
        bbox = BoundingBox(x=100, y=100, width=100, height=50)
        assert bbox.center == (150.0, 125.0)

    def test_from_xyxy(self):
        bbox = BoundingBox.from_xyxy(10, 20, 60, 100)
        assert bbox == BoundingBox(x=10, y=20, width=50, height=80)

    def test_distance_between_centers(self):
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(30, 40, 10, 10)
        assert a.distance_to(b) == pytest.approx(50.0)


class TestRawDetection:
    def test_center_from_box(self):
        det = RawDetection("cell phone", 0.73, BoundingBox(10, 20, 30, 40))
        assert det.label == "cell phone"
        assert det.confidence == pytest.approx(0.73)
        assert det.center == (25.0, 40.0)

    def test_to_dict(self):
        det = RawDetection("person", 0.9, BoundingBox(0.0, 0.0, 10.0, 10.0))
        d = det.to_dict()
        assert d["label"] == "person"
        assert d["box"] == {"x": 0.0, "y": 0.0, "width": 10.0, "height": 10.0}


class TestTrackedPerson:
    def test_from_detection(self):
        det = RawDetection("person", 0.8, BoundingBox(100, 100, 50, 100))
        p = TrackedPerson.from_detection("person-3", det)
        assert p.id == "person-3"
        assert p.center == (125.0, 150.0)
        assert p.student_id is None

    def test_to_dict_includes_student_fields(self):
        p = TrackedPerson(
            id="person-0",
            box=BoundingBox(0, 0, 10, 10),
            confidence=0.9,
            student_id="s-17",
            student_name="A. Student",
        )
        d = p.to_dict()
        assert d["student_id"] == "s-17"
        assert d["student_name"] == "A. Student"


class TestBehaviorEvent:
    def test_labels_and_descriptions(self):
        assert BehaviorType.PHONE_DETECTED.label == "Phone Detected"
        assert BehaviorType.LOOKING_DOWN.label == "Looking Down"
        assert BehaviorType.HEAD_MOVEMENT.description == "Rapid head or body movement detected"
        for t in BehaviorType:
            assert t.label
            assert t.description

    def test_for_person_copies_student_fields(self, person):
        p = person("person-1", 100, 100, student_id="s-1", student_name="Sam")
        e = BehaviorEvent.for_person(p, BehaviorType.PHONE_DETECTED, 0.8, 1234.0)
        assert e.person_id == "person-1"
        assert e.description == BehaviorType.PHONE_DETECTED.description
        assert e.student_id == "s-1"
        assert e.student_name == "Sam"
        assert e.dedup_key == ("person-1", BehaviorType.PHONE_DETECTED)

    def test_ids_are_unique(self, person):
        p = person("person-1", 100, 100)
        a = BehaviorEvent.for_person(p, BehaviorType.LOOKING_DOWN, 0.6, 0.0)
        b = BehaviorEvent.for_person(p, BehaviorType.LOOKING_DOWN, 0.6, 0.0)
        assert a.id != b.id

    def test_age_and_to_dict(self, person):
        e = BehaviorEvent.for_person(person("person-1", 0, 0), BehaviorType.HEAD_MOVEMENT, 1.0, 1000.0)
        assert e.age_ms(3500.0) == 2500.0
        d = e.to_dict()
        assert d["type"] == "head_movement"
        assert d["label"] == "Head Movement"


class TestStats:
    def test_detection_stats_defaults(self):
        s = DetectionStats()
        assert s.to_dict() == {
            "total_detected": 0,
            "suspicious_count": 0,
            "last_updated_ms": 0.0,
            "fps": 0,
        }

    def test_session_tracks_peak_and_alerts(self):
        session = MonitoringSession(start_ms=1000.0, room_name="Room 101")
        session.record_frame(person_count=3, accepted_alerts=1)
        session.record_frame(person_count=5, accepted_alerts=0)
        session.record_frame(person_count=2, accepted_alerts=2)

        assert session.peak_person_count == 5
        assert session.total_alerts == 3
        assert session.duration_s(4000.0) == pytest.approx(3.0)

    def test_session_close_freezes_duration(self):
        session = MonitoringSession(start_ms=0.0)
        session.close(2000.0)
        session.close(9000.0)
        assert session.end_ms == 2000.0
        assert session.duration_s(60000.0) == pytest.approx(2.0)


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        fd = FrameData.from_numpy(frame, captured_at_ms=5.0, frame_index=2, source="cam")
        assert (fd.width, fd.height) == (640, 480)
        assert fd.frame_index == 2
        assert fd.source == "cam"
