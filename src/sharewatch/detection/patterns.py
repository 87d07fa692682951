"""Behavioral Pattern Analyzer - account-sharing indicators over a login window.

Three additive signals over the last N days (default 7):
- location diversity: distinct (city, country) pairs
- device diversity: distinct fingerprints beyond the device cap
- near-simultaneous logins from different cities, per adjacent pair

Adjacent-pair hits accumulate without a cap, so the raw score can pass
100. Only PatternAnalysis.display_score is clamped.
"""

from datetime import timedelta
from typing import List, Optional, Set, Tuple

from sharewatch.common.clock import Clock, utcnow
from sharewatch.common.config.rules import FraudRules
from sharewatch.data.schemas.login_event import LoginEvent
from sharewatch.detection.schema import PatternAnalysis
from sharewatch.tracking.recorder import LoginEventRecorder


class LoginPatternAnalyzer:
    """Scores a user's recent login history for sharing behaviour."""

    def __init__(
        self,
        recorder: LoginEventRecorder,
        rules: Optional[FraudRules] = None,
        clock: Clock = utcnow,
    ):
        self.recorder = recorder
        self.rules = rules or FraudRules()
        self.clock = clock

    def analyze(self, user_id: str) -> PatternAnalysis:
        """Analyze the user's login window.

        Raises:
            StoreError: If history cannot be read
        """
        since = self.clock() - timedelta(days=self.rules.pattern_window_days)
        events = self.recorder.recent_events(user_id, since=since)
        return self.score(events)

    def score(self, events: List[LoginEvent]) -> PatternAnalysis:
        """Score an event window ordered newest first."""
        if len(events) < self.rules.pattern_min_events:
            return PatternAnalysis(suspicious=False, events_analyzed=len(events))

        weights = self.rules.weights
        window_days = self.rules.pattern_window_days
        reasons: List[str] = []
        risk_score = 0

        # Check 1: location diversity
        locations: Set[Tuple[str, Optional[str]]] = {
            (event.city, event.country) for event in events if event.city
        }
        if len(locations) >= self.rules.location_diversity_threshold:
            reasons.append(
                f"Multiple locations: {len(locations)} different cities in {window_days} days"
            )
            risk_score += weights.location

        # Check 2: device diversity
        devices = {event.device_fingerprint for event in events if event.device_fingerprint}
        if len(devices) > self.rules.max_devices_per_user:
            reasons.append(
                f"Excessive devices: {len(devices)} different devices in {window_days} days"
            )
            risk_score += weights.devices

        # Check 3: near-simultaneous logins from different cities
        for current, following in zip(events, events[1:]):
            if not current.city or not following.city:
                continue
            if current.city == following.city:
                continue

            minutes = abs((current.login_time - following.login_time).total_seconds()) / 60
            if minutes < self.rules.simultaneous_window_minutes:
                reasons.append(
                    f"Simultaneous logins: {current.city} and {following.city} "
                    f"within {minutes:.0f} minutes"
                )
                risk_score += weights.simultaneous

        return PatternAnalysis(
            suspicious=risk_score >= self.rules.suspicious_threshold,
            reasons=reasons,
            risk_score=risk_score,
            events_analyzed=len(events),
        )
