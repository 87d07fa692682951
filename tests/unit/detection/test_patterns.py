"""Unit tests for the Behavioral Pattern Analyzer."""

from datetime import datetime, timedelta
from typing import List, Optional

import pytest

from sharewatch.common.config.rules import FraudRules
from sharewatch.data.schemas.login_event import LoginEvent
from sharewatch.data.schemas.request import GeoLocation
from sharewatch.detection.patterns import LoginPatternAnalyzer
from sharewatch.detection.schema import PatternAnalysis
from sharewatch.tracking.recorder import LoginEventRecorder

USER = "user_abc123"
NOW = datetime(2026, 1, 25, 12, 0, 0)


def _event(
    seq: int,
    minutes_ago: float,
    city: Optional[str] = None,
    country: Optional[str] = "US",
    fingerprint: Optional[str] = "fp-1",
) -> LoginEvent:
    return LoginEvent(
        event_id=seq,
        user_id=USER,
        device_fingerprint=fingerprint,
        city=city,
        country=country if city else None,
        success=True,
        login_time=NOW - timedelta(minutes=minutes_ago),
    )


def _newest_first(events: List[LoginEvent]) -> List[LoginEvent]:
    return sorted(events, key=lambda e: (e.login_time, e.event_id), reverse=True)


@pytest.fixture
def analyzer(database, clock):
    return LoginPatternAnalyzer(LoginEventRecorder(database, clock=clock), FraudRules(), clock=clock)


class TestInsufficientSignal:

    def test_fewer_than_three_events(self, analyzer):
        events = [_event(1, 10, "Boston"), _event(2, 5, "Tokyo", "JP")]
        result = analyzer.score(_newest_first(events))
        assert result == PatternAnalysis(suspicious=False, reasons=[], risk_score=0, events_analyzed=2)

    def test_empty_history(self, analyzer):
        assert analyzer.analyze(USER).risk_score == 0


class TestScoreComposition:

    def test_three_cities_only(self, analyzer):
        events = [
            _event(1, 600, "New York"),
            _event(2, 300, "Boston"),
            _event(3, 60, "Chicago"),
        ]
        result = analyzer.score(_newest_first(events))
        assert result.risk_score == 20
        assert result.suspicious is False
        assert result.reasons == ["Multiple locations: 3 different cities in 7 days"]

    def test_three_cities_and_excess_devices(self, analyzer):
        events = [
            _event(1, 600, "New York", fingerprint="fp-1"),
            _event(2, 300, "Boston", fingerprint="fp-2"),
            _event(3, 200, "Boston", fingerprint="fp-3"),
            _event(4, 60, "Chicago", fingerprint="fp-4"),
        ]
        result = analyzer.score(_newest_first(events))
        assert result.risk_score == 50
        assert result.suspicious is True
        assert "Excessive devices: 4 different devices in 7 days" in result.reasons

    def test_devices_at_cap_do_not_score(self, analyzer):
        events = [_event(i, 100 * i, fingerprint=f"fp-{i}") for i in range(1, 4)]
        assert analyzer.score(_newest_first(events)).risk_score == 0

    def test_same_city_different_country_counts_twice(self, analyzer):
        events = [
            _event(1, 600, "Paris", "FR"),
            _event(2, 300, "Paris", "US"),
            _event(3, 60, "London", "GB"),
        ]
        assert analyzer.score(_newest_first(events)).risk_score == 20

    def test_null_fingerprints_ignored(self, analyzer):
        events = [_event(i, 100 * i, fingerprint=None) for i in range(1, 6)]
        assert analyzer.score(_newest_first(events)).risk_score == 0


class TestSimultaneousLogins:

    def test_adjacent_cities_within_window(self, analyzer):
        events = [
            _event(1, 600, "New York"),
            _event(2, 20, "New York"),
            _event(3, 0, "Tokyo", "JP"),
        ]
        result = analyzer.score(_newest_first(events))
        assert result.risk_score == 40
        assert result.reasons == ["Simultaneous logins: Tokyo and New York within 20 minutes"]

    def test_pairs_accumulate_without_cap(self, analyzer):
        events = [
            _event(1, 40, "Boston"),
            _event(2, 30, "Tokyo", "JP"),
            _event(3, 20, "Boston"),
            _event(4, 10, "Tokyo", "JP"),
        ]
        result = analyzer.score(_newest_first(events))
        # 3 pairs x 40, no location bonus (2 distinct cities)
        assert result.risk_score == 120
        assert result.display_score == 100
        assert result.suspicious is True

    def test_thirty_minutes_is_not_simultaneous(self, analyzer):
        events = [
            _event(1, 600, "New York"),
            _event(2, 30, "New York"),
            _event(3, 0, "Tokyo", "JP"),
        ]
        assert analyzer.score(_newest_first(events)).risk_score == 0

    def test_pairs_with_missing_city_skipped(self, analyzer):
        events = [
            _event(1, 20, "Boston"),
            _event(2, 10, None),
            _event(3, 0, "Tokyo", "JP"),
        ]
        assert analyzer.score(_newest_first(events)).risk_score == 0


class TestAnalyzeFromStore:

    def test_reads_seven_day_window(self, database, clock):
        recorder = LoginEventRecorder(database, clock=clock)
        analyzer = LoginPatternAnalyzer(recorder, FraudRules(), clock=clock)

        recorder.record(USER, "fp-old", "203.0.113.7", True, geo=GeoLocation(city="Lisbon", country="PT"))
        clock.advance(days=8)
        for city in ["New York", "Boston", "Chicago"]:
            recorder.record(USER, "fp-1", "203.0.113.7", True, geo=GeoLocation(city=city, country="US"))
            clock.advance(hours=2)

        result = analyzer.analyze(USER)
        assert result.events_analyzed == 3
        assert result.risk_score == 20

    def test_failed_logins_are_included(self, database, clock):
        recorder = LoginEventRecorder(database, clock=clock)
        analyzer = LoginPatternAnalyzer(recorder, FraudRules(), clock=clock)

        for i in range(4):
            recorder.record(USER, f"fp-{i}", "203.0.113.7", False, failure_reason="invalid_code")
            clock.advance(hours=1)

        result = analyzer.analyze(USER)
        assert result.risk_score == 30
        assert result.suspicious is False
