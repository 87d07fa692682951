"""Fraud check orchestration.

Runs the impossible-travel and login-pattern detectors independently and
pushes positive findings to the flagging service. A failure in one
detector is logged and never stops the other, and never fails the login.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sharewatch.common.exceptions import DetectorError, ShareWatchError
from sharewatch.data.schemas.account_flag import (
    FlagReason,
    ImpossibleTravelEvidence,
    PatternEvidence,
)
from sharewatch.data.schemas.request import GeoLocation
from sharewatch.detection.impossible_travel import ImpossibleTravelDetector
from sharewatch.detection.patterns import LoginPatternAnalyzer
from sharewatch.detection.schema import PatternAnalysis, TravelCheck
from sharewatch.governance.flags import FlaggingService

logger = logging.getLogger(__name__)


def _detector_error(detector_name: str, error: Exception) -> DetectorError:
    """Wrap a detector failure, keeping the underlying error code if any."""
    details: Dict[str, Any] = {"cause": type(error).__name__}
    if isinstance(error, ShareWatchError):
        details["cause_code"] = error.code
        details["cause_details"] = error.details
    return DetectorError(str(error), detector_name=detector_name, details=details)


class FraudCheckReport(BaseModel):
    """What each detector concluded during one run."""
    travel: Optional[TravelCheck] = Field(
        default=None, description="None when skipped (no coordinates) or failed"
    )
    patterns: Optional[PatternAnalysis] = Field(default=None, description="None when failed")
    flags_created: List[FlagReason] = Field(default_factory=list)
    errors: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict, description="Detector name -> DetectorError.to_dict()"
    )


class FraudChecks:
    """Sequences both detectors and the flagging sink."""

    def __init__(
        self,
        travel_detector: ImpossibleTravelDetector,
        pattern_analyzer: LoginPatternAnalyzer,
        flagging: FlaggingService,
    ):
        self.travel_detector = travel_detector
        self.pattern_analyzer = pattern_analyzer
        self.flagging = flagging

    def run(
        self,
        user_id: str,
        geo: Optional[GeoLocation] = None,
        exclude_event_id: Optional[int] = None,
    ) -> FraudCheckReport:
        """Run all fraud checks for a login.

        Args:
            user_id: Account that just logged in
            geo: Location of the current login
            exclude_event_id: The current login's event, if already recorded

        Returns:
            FraudCheckReport; never raises for detector or store failures
        """
        report = FraudCheckReport()

        # Check 1: Impossible travel
        if geo is not None and geo.has_coordinates:
            try:
                travel = self.travel_detector.detect(
                    user_id, geo.latitude, geo.longitude, exclude_event_id=exclude_event_id
                )
                report.travel = travel
                if travel.is_impossible:
                    evidence = ImpossibleTravelEvidence(
                        details=travel.details or "",
                        distance_km=travel.distance_km or 0.0,
                        elapsed_hours=travel.elapsed_hours or 0.0,
                        speed_kmh=travel.speed_kmh,
                    )
                    if self.flagging.flag_if_suspicious(
                        user_id, FlagReason.IMPOSSIBLE_TRAVEL, evidence
                    ):
                        report.flags_created.append(FlagReason.IMPOSSIBLE_TRAVEL)
            except Exception as e:
                logger.exception(f"[FRAUD] Impossible-travel check failed for user {user_id}")
                report.errors["impossible_travel"] = _detector_error("impossible_travel", e).to_dict()

        # Check 2: Login pattern analysis
        try:
            analysis = self.pattern_analyzer.analyze(user_id)
            report.patterns = analysis
            if analysis.suspicious:
                evidence = PatternEvidence(
                    risk_score=analysis.risk_score,
                    reasons=analysis.reasons,
                )
                if self.flagging.flag_if_suspicious(
                    user_id, FlagReason.SUSPICIOUS_LOGIN_PATTERN, evidence
                ):
                    report.flags_created.append(FlagReason.SUSPICIOUS_LOGIN_PATTERN)
        except Exception as e:
            logger.exception(f"[FRAUD] Login-pattern check failed for user {user_id}")
            report.errors["suspicious_login_pattern"] = _detector_error(
                "suspicious_login_pattern", e
            ).to_dict()

        return report
