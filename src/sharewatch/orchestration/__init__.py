"""Orchestration - fraud checks and the per-login flow."""

from sharewatch.orchestration.fraud_checks import FraudCheckReport, FraudChecks
from sharewatch.orchestration.login_guard import LoginGuard, LoginOutcome

__all__ = ["FraudCheckReport", "FraudChecks", "LoginGuard", "LoginOutcome"]
