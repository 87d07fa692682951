"""Impossible-Travel Detector.

Compares the current login location with the user's most recent
successful login and flags transitions whose implied speed exceeds the
configured threshold (default 800 km/h).
"""

import logging
from datetime import timedelta
from typing import Optional

from sharewatch.common.clock import Clock, utcnow
from sharewatch.common.config.rules import FraudRules
from sharewatch.detection.geo import haversine_km, valid_coordinates
from sharewatch.detection.schema import TravelCheck
from sharewatch.tracking.recorder import LoginEventRecorder

logger = logging.getLogger(__name__)


class ImpossibleTravelDetector:
    """Flags physically impossible location transitions.

    This detector reads history. It does not flag or block.
    """

    def __init__(
        self,
        recorder: LoginEventRecorder,
        rules: Optional[FraudRules] = None,
        clock: Clock = utcnow,
    ):
        self.recorder = recorder
        self.rules = rules or FraudRules()
        self.clock = clock

    def detect(
        self,
        user_id: str,
        current_lat: float,
        current_lon: float,
        exclude_event_id: Optional[int] = None,
    ) -> TravelCheck:
        """Check travel from the last successful login to the current coordinates.

        Args:
            user_id: Account being checked
            current_lat: Latitude of the current login
            current_lon: Longitude of the current login
            exclude_event_id: Event to ignore (the current login, if already recorded)

        Returns:
            TravelCheck; not impossible when there is no usable prior login

        Raises:
            StoreError: If history cannot be read
        """
        if not valid_coordinates(current_lat, current_lon):
            logger.warning(f"[TRAVEL] Ignoring invalid coordinates for user {user_id}")
            return TravelCheck(is_impossible=False)

        now = self.clock()
        recent = self.recorder.recent_events(
            user_id,
            since=now - timedelta(hours=self.rules.travel_lookback_hours),
            success_only=True,
            limit=self.rules.travel_history_limit,
            exclude_event_id=exclude_event_id,
        )
        if not recent:
            return TravelCheck(is_impossible=False)

        last_login = recent[0]
        if not last_login.has_coordinates:
            return TravelCheck(is_impossible=False)

        distance = haversine_km(
            last_login.latitude, last_login.longitude, current_lat, current_lon
        )
        elapsed_hours = (now - last_login.login_time).total_seconds() / 3600
        threshold = self.rules.impossible_travel_kmh

        # Simultaneous or clock-skewed logins have no finite speed
        if elapsed_hours <= 0:
            if elapsed_hours < 0:
                timing = (
                    f"with the previous login {-elapsed_hours * 60:.0f} min in the future "
                    f"(clock skew)"
                )
            else:
                timing = "with no elapsed time"
            return TravelCheck(
                is_impossible=True,
                details=(
                    f"Travel of {distance:.0f}km {timing} "
                    f"exceeds {threshold:.0f} km/h threshold"
                ),
                distance_km=distance,
                elapsed_hours=elapsed_hours,
                speed_kmh=None,
            )

        speed = distance / elapsed_hours
        if speed > threshold:
            return TravelCheck(
                is_impossible=True,
                details=(
                    f"Travel of {distance:.0f}km in {elapsed_hours:.1f}h "
                    f"({speed:.0f} km/h) exceeds {threshold:.0f} km/h threshold"
                ),
                distance_km=distance,
                elapsed_hours=elapsed_hours,
                speed_kmh=speed,
            )

        return TravelCheck(
            is_impossible=False,
            distance_km=distance,
            elapsed_hours=elapsed_hours,
            speed_kmh=speed,
        )
