"""
Tests for person extraction and identity assignment.
"""

import pytest

from detection.person import PersonExtractor
from tracking.identity import ProximityIdentityMatcher


class TestPersonExtractorIndexMode:
    def test_filters_to_person_label(self, person_det, phone_det):
        extractor = PersonExtractor(identity_mode="index")
        detections = [person_det(100, 100), phone_det(120, 120), person_det(400, 100)]

        persons = extractor.extract(detections)

        assert [p.id for p in persons] == ["person-0", "person-1"]
        assert persons[0].center == (100.0, 100.0)
        assert persons[1].center == (400.0, 100.0)

    def test_ids_follow_adapter_order(self, person_det):
        """Index ids belong to list positions, not to people."""
        extractor = PersonExtractor(identity_mode="index")
        a, b = person_det(100, 100), person_det(400, 100)

        first = extractor.extract([a, b])
        second = extractor.extract([b, a])

        assert first[0].center == (100.0, 100.0)
        assert second[0].id == "person-0"
        assert second[0].center == (400.0, 100.0)

    def test_no_persons(self, phone_det):
        extractor = PersonExtractor(identity_mode="index")
        assert extractor.extract([phone_det(10, 10)]) == []
        assert extractor.extract([]) == []

    def test_confidence_carried_over(self, person_det):
        extractor = PersonExtractor(identity_mode="index")
        persons = extractor.extract([person_det(0, 0, conf=0.42)])
        assert persons[0].confidence == pytest.approx(0.42)

    def test_custom_person_label(self, person_det):
        from models.detection import RawDetection

        det = person_det(10, 10)
        student = RawDetection(label="student", confidence=0.9, box=det.box)
        extractor = PersonExtractor(person_label="student", identity_mode="index")

        assert len(extractor.extract([det, student])) == 1

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            PersonExtractor(identity_mode="appearance")


class TestPersonExtractorProximityMode:
    def test_ids_follow_people_when_order_changes(self, person_det):
        extractor = PersonExtractor(identity_mode="proximity")
        a, b = person_det(100, 100), person_det(400, 100)

        first = extractor.extract([a, b])
        known = {p.id: p.center for p in first}
        second = extractor.extract([person_det(405, 102), person_det(98, 101)], known=known)

        ids_by_x = {round(p.center[0]): p.id for p in second}
        first_by_x = {round(p.center[0]): p.id for p in first}
        assert ids_by_x[98] == first_by_x[100]
        assert ids_by_x[405] == first_by_x[400]


class TestProximityIdentityMatcher:
    def test_allocates_fresh_ids_without_history(self, person_det):
        matcher = ProximityIdentityMatcher()
        ids = matcher.assign([person_det(0, 0), person_det(500, 0)])
        assert ids == ["person-0", "person-1"]
        assert matcher.next_id == 2

    def test_nearest_pair_wins(self, person_det):
        matcher = ProximityIdentityMatcher(max_distance_px=150)
        known = {"person-7": (100.0, 100.0)}

        ids = matcher.assign([person_det(220, 100), person_det(110, 100)], known)

        assert ids[1] == "person-7"
        assert ids[0] != "person-7"

    def test_outside_gate_gets_new_id(self, person_det):
        matcher = ProximityIdentityMatcher(max_distance_px=50)
        matcher.next_id = 3
        known = {"person-0": (0.0, 0.0)}

        ids = matcher.assign([person_det(300, 300)], known)

        assert ids == ["person-3"]

    def test_no_id_used_twice(self, person_det):
        matcher = ProximityIdentityMatcher(max_distance_px=500)
        known = {"person-0": (100.0, 100.0)}

        ids = matcher.assign([person_det(100, 100), person_det(105, 100), person_det(95, 100)], known)

        assert len(set(ids)) == 3
        assert ids[0] == "person-0"

    def test_reset(self, person_det):
        matcher = ProximityIdentityMatcher()
        matcher.assign([person_det(0, 0)])
        matcher.reset()
        assert matcher.assign([person_det(0, 0)]) == ["person-0"]
