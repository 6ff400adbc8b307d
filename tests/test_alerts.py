"""
Tests for the alert aggregator (dedupe window, retention, dismissal).
"""

from models.behavior import BehaviorEvent, BehaviorType
from models.config import AlertConfig
from analytics.alerts import AlertAggregator


def event(person_id="person-0", type_=BehaviorType.PHONE_DETECTED, ts=0.0, confidence=0.8):
    return BehaviorEvent(person_id=person_id, type=type_, confidence=confidence, timestamp_ms=ts)


class TestMerge:
    def test_accepts_new_event(self):
        alerts = AlertAggregator()
        e = event(ts=0.0)

        accepted = alerts.merge([e], now_ms=0.0)

        assert accepted == [e]
        assert [a.id for a in alerts.snapshot()] == [e.id]

    def test_duplicate_within_window_suppressed(self):
        """Same (person, type) 4 s later is dropped."""
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        accepted = alerts.merge([event(ts=4000.0)], now_ms=4000.0)

        assert accepted == []
        assert len(alerts) == 1

    def test_duplicate_after_window_accepted(self):
        """Same (person, type) 6 s later is accepted; the older entry stays until expiry."""
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        accepted = alerts.merge([event(ts=6000.0)], now_ms=6000.0)

        assert len(accepted) == 1
        assert len(alerts) == 2

    def test_window_boundary_is_exclusive(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        assert len(alerts.merge([event(ts=5000.0)], now_ms=5000.0)) == 1

    def test_different_type_or_person_not_duplicate(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        accepted = alerts.merge(
            [event(type_=BehaviorType.LOOKING_DOWN, ts=100.0), event(person_id="person-1", ts=100.0)],
            now_ms=100.0,
        )

        assert len(accepted) == 2

    def test_duplicates_within_one_batch(self):
        alerts = AlertAggregator()
        first, second = event(ts=0.0), event(ts=0.0)

        accepted = alerts.merge([first, second], now_ms=0.0)

        assert accepted == [first]

    def test_expired_entries_dropped_on_merge(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        alerts.merge([], now_ms=30000.0)

        assert len(alerts) == 0

    def test_retained_just_before_expiry(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        alerts.merge([], now_ms=29999.0)

        assert len(alerts) == 1

    def test_clear_then_merge_accepts(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)
        alerts.clear_all()

        accepted = alerts.merge([event(ts=100.0)], now_ms=100.0)

        assert len(accepted) == 1

    def test_custom_windows(self):
        alerts = AlertAggregator(AlertConfig(retention_ms=1000.0, suppression_ms=200.0))
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        assert len(alerts.merge([event(ts=250.0)], now_ms=250.0)) == 1
        alerts.merge([], now_ms=1000.0)
        assert len(alerts) == 1


class TestPrune:
    def test_prune_idempotent(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0), event(person_id="person-1", ts=20000.0)], now_ms=20000.0)

        assert alerts.prune(31000.0) == 1
        assert alerts.prune(31000.0) == 0
        assert len(alerts) == 1

    def test_prune_cycle_respects_interval(self):
        alerts = AlertAggregator()
        alerts.merge([event(ts=0.0)], now_ms=0.0)

        assert alerts.run_prune_cycle(29000.0) == 0
        # Expired, but the last cycle was under 5 s ago
        assert alerts.run_prune_cycle(31000.0) == 0
        assert len(alerts) == 1
        assert alerts.run_prune_cycle(34000.0) == 1


class TestDismissAndSnapshot:
    def test_dismiss(self):
        alerts = AlertAggregator()
        e = event(ts=0.0)
        alerts.merge([e], now_ms=0.0)

        assert alerts.dismiss(e.id) is True
        assert alerts.dismiss(e.id) is False
        assert len(alerts) == 0

    def test_dismiss_unknown(self):
        assert AlertAggregator().dismiss("nope") is False

    def test_dismissed_event_can_reenter(self):
        alerts = AlertAggregator()
        e = event(ts=0.0)
        alerts.merge([e], now_ms=0.0)
        alerts.dismiss(e.id)

        assert len(alerts.merge([event(ts=100.0)], now_ms=100.0)) == 1

    def test_snapshot_newest_first(self):
        alerts = AlertAggregator()
        alerts.merge([event(person_id="a", ts=0.0)], now_ms=0.0)
        alerts.merge([event(person_id="b", ts=2000.0)], now_ms=2000.0)

        assert [e.person_id for e in alerts.snapshot()] == ["b", "a"]
        assert alerts.to_list()[0]["person_id"] == "b"
