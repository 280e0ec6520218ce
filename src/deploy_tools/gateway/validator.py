"""Deployment validation for AgentCore gateway targets.

Runs five checks against a gateway and prints a pass/warn/fail line for
each. Only a missing gateway is fatal; every later check is advisory.
"""

import logging
from typing import List, Optional

from ..core.aws_client import AWSClientManager
from ..core.config import Settings
from ..core.console import Reporter
from ..core.validator import BaseCheck, CheckReport, CheckRunner
from .checks import (
    CredentialAccessCheck,
    GatewayExistenceCheck,
    GatewayTargetsCheck,
    StackStatusCheck,
    TargetDetailsCheck,
)
from .client import GatewayClient


logger = logging.getLogger(__name__)


class GatewayDeploymentValidator:
    """Validates a deployed gateway and its targets."""

    def __init__(
        self,
        aws_client: AWSClientManager,
        settings: Settings,
        reporter: Reporter,
        gateway_client: Optional[GatewayClient] = None,
    ) -> None:
        """Initialize gateway deployment validator.

        Args:
            aws_client: Configured AWS client manager
            settings: Loaded settings
            reporter: Console reporter
            gateway_client: Optional pre-built gateway client
        """
        self.aws_client = aws_client
        self.settings = settings
        self.reporter = reporter
        self.gateway_client = gateway_client or GatewayClient(aws_client)

    def build_checks(self) -> List[BaseCheck]:
        """Create the checks in the order they run."""
        check_types = [
            GatewayExistenceCheck,
            GatewayTargetsCheck,
            TargetDetailsCheck,
            CredentialAccessCheck,
            StackStatusCheck,
        ]
        return [
            check_type(self.gateway_client, self.settings)
            for check_type in check_types
        ]

    def validate(self, gateway_id: str) -> CheckReport:
        """Run every gateway check.

        Args:
            gateway_id: Gateway identifier to validate

        Returns:
            CheckReport; its exit_code is 1 only if the gateway is missing
        """
        self.reporter.info(f"Validating gateway: {gateway_id}")
        logger.debug(
            "Validating %s in %s", gateway_id, self.aws_client.get_current_region()
        )

        runner = CheckRunner(self.build_checks(), reporter=self.reporter)
        report = runner.run(gateway_id, context={"gateway_id": gateway_id})

        self._print_summary(report)
        return report

    def _print_summary(self, report: CheckReport) -> None:
        self.reporter.section("Summary")
        if report.aborted:
            self.reporter.error("Validation stopped: gateway not found")
            return

        warnings = len(report.warnings)
        failures = len(report.failures)
        if failures:
            self.reporter.warning(
                f"Validation completed with {failures} failed check(s) "
                f"and {warnings} warning(s)"
            )
        elif warnings:
            self.reporter.warning(
                f"Validation completed with {warnings} warning(s)"
            )
        else:
            self.reporter.info("All gateway checks passed")
