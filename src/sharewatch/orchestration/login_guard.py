"""Login Guard - the per-login entry point for the surrounding application.

Flow for one attempt:
    fingerprint -> device admission (successful logins) -> record event
    -> fraud checks (successful logins)

Admission errors propagate to the caller. Recording and detection are
best-effort.
"""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from sharewatch.common.clock import Clock, utcnow
from sharewatch.common.config.rules import FraudRules, load_rules
from sharewatch.common.config.settings import Config, get_config
from sharewatch.common.constants import DataConstants
from sharewatch.common.exceptions import ConfigurationError
from sharewatch.data.schemas.device import DeviceAdmission, DeviceInfo
from sharewatch.data.schemas.login_event import LoginEvent
from sharewatch.data.schemas.request import FingerprintRequest, GeoLocation
from sharewatch.devices.registry import DeviceRegistry
from sharewatch.detection.impossible_travel import ImpossibleTravelDetector
from sharewatch.detection.patterns import LoginPatternAnalyzer
from sharewatch.fingerprint.generator import generate_fingerprint, is_degenerate
from sharewatch.fingerprint.user_agent import parse_user_agent
from sharewatch.governance.flags import FlaggingService
from sharewatch.orchestration.fraud_checks import FraudCheckReport, FraudChecks
from sharewatch.storage.database import Database
from sharewatch.tracking.recorder import LoginEventRecorder

logger = logging.getLogger(__name__)


class LoginOutcome(BaseModel):
    """Everything the engine decided about one login attempt."""
    allowed: bool = Field(..., description="Authenticated and device admitted")
    fingerprint: str
    low_trust_fingerprint: bool = Field(
        default=False, description="Fingerprint derived from all-empty attributes"
    )
    device_info: DeviceInfo
    admission: Optional[DeviceAdmission] = Field(
        default=None, description="None for failed authentication"
    )
    event: Optional[LoginEvent] = Field(default=None, description="None if recording failed")
    fraud: Optional[FraudCheckReport] = Field(
        default=None, description="None unless the login was admitted"
    )

    @property
    def message(self) -> Optional[str]:
        return self.admission.message if self.admission else None


class LoginGuard:
    """Wires fingerprinting, admission, recording and detection together."""

    def __init__(
        self,
        database: Database,
        rules: Optional[FraudRules] = None,
        clock: Clock = utcnow,
    ):
        self.database = database
        self.rules = rules or FraudRules()
        self.clock = clock

        self.registry = DeviceRegistry(database, self.rules, clock=clock)
        self.recorder = LoginEventRecorder(database, clock=clock)
        self.flagging = FlaggingService(database, clock=clock)
        self.fraud_checks = FraudChecks(
            ImpossibleTravelDetector(self.recorder, self.rules, clock=clock),
            LoginPatternAnalyzer(self.recorder, self.rules, clock=clock),
            self.flagging,
        )

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "LoginGuard":
        """Build a guard from environment configuration.

        Raises:
            ConfigurationError: If SHAREWATCH_RULES_FILE names a missing file
                or the rules are invalid
        """
        config = config or get_config()
        rules_file = config.resolved_rules_file
        if config.rules_file is not None and not rules_file.exists():
            raise ConfigurationError(
                f"Configured fraud rules file does not exist: {rules_file}",
                details={"path": str(rules_file)},
            )
        rules = load_rules(rules_file)
        database = Database(config.database_url, echo=config.database_echo)
        return cls(database, rules)

    def process_login(
        self,
        user_id: str,
        request: FingerprintRequest,
        success: bool,
        failure_reason: Optional[str] = None,
        geo: Optional[GeoLocation] = None,
    ) -> LoginOutcome:
        """Handle one authentication attempt.

        Args:
            user_id: Account (already verified upstream when success is True)
            request: Client attributes
            success: Upstream authentication outcome
            failure_reason: Upstream failure reason
            geo: Resolved location, if any

        Returns:
            LoginOutcome

        Raises:
            StoreError: If the admission decision cannot be made
        """
        fingerprint = generate_fingerprint(request)
        device_info = parse_user_agent(request.user_agent)
        low_trust = is_degenerate(request)
        if low_trust:
            logger.warning(f"[DEVICE] Low-trust fingerprint for user {user_id}: no client attributes")

        admission = None
        if success:
            admission = self.registry.admit_device(
                user_id, fingerprint, device_info, request.ip_address, geo
            )
            if not admission.allowed:
                success = False
                failure_reason = DataConstants.DEVICE_LIMIT_FAILURE_REASON

        event = self.recorder.record(
            user_id, fingerprint, request.ip_address, success, failure_reason, geo
        )

        fraud = None
        if success:
            fraud = self.fraud_checks.run(
                user_id, geo, exclude_event_id=event.event_id if event else None
            )

        return LoginOutcome(
            allowed=success,
            fingerprint=fingerprint,
            low_trust_fingerprint=low_trust,
            device_info=device_info,
            admission=admission,
            event=event,
            fraud=fraud,
        )
