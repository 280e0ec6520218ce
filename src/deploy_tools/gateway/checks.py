"""Checks run against a deployed AgentCore gateway.

The checks run in order and share a context dictionary:

- 'gateway_id': identifier being validated (set by the caller)
- 'gateway': Gateway record, set by GatewayExistenceCheck
- 'targets': list of GatewayTarget summaries, set by GatewayTargetsCheck
"""

import logging
from typing import Any, Dict, List

from botocore.exceptions import BotoCoreError, ClientError

from ..core.aws_client import AWSClientError
from ..core.config import Settings
from ..core.validator import BaseCheck, CheckResult, CheckStatus
from .client import GatewayClient
from .models import GatewayTarget, role_name_from_arn, stack_name_for


logger = logging.getLogger(__name__)

AWS_ERRORS = (ClientError, BotoCoreError, AWSClientError)

TABLE_RULE = "|----------------------------------------|"


def _error_message(error: Exception) -> str:
    if isinstance(error, ClientError):
        err = error.response.get("Error", {})
        return f"{err.get('Code', 'Error')}: {err.get('Message', '')}".strip()
    return str(error)


class GatewayCheck(BaseCheck):
    """Base class for checks that talk to the gateway APIs."""

    def __init__(self, gateway_client: GatewayClient, settings: Settings) -> None:
        self.gateway_client = gateway_client
        self.settings = settings


class GatewayExistenceCheck(GatewayCheck):
    """Confirms the gateway exists. Failure stops the validation run."""

    @property
    def name(self) -> str:
        return "Gateway Existence"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        gateway_id = context["gateway_id"]
        try:
            gateway = self.gateway_client.get_gateway(gateway_id)
        except AWS_ERRORS as e:
            logger.debug("GetGateway failed for %s: %s", gateway_id, e)
            return [
                self.result(
                    CheckStatus.FAILED,
                    f"Gateway not found: {gateway_id}",
                    data={"error": _error_message(e)},
                    fatal=True,
                )
            ]

        context["gateway"] = gateway
        return [
            self.result(
                CheckStatus.PASSED,
                "Gateway exists",
                data={
                    "gateway_arn": gateway.arn,
                    "status": gateway.status,
                    "role_arn": gateway.role_arn,
                },
            )
        ]


class GatewayTargetsCheck(GatewayCheck):
    """Lists the targets attached to the gateway."""

    @property
    def name(self) -> str:
        return "Gateway Targets"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        context["targets"] = []
        try:
            targets = self.gateway_client.list_targets(context["gateway_id"])
        except AWS_ERRORS as e:
            return [
                self.result(
                    CheckStatus.FAILED,
                    "Failed to list targets",
                    data={"error": _error_message(e)},
                )
            ]

        context["targets"] = targets
        details: List[str] = []
        if targets:
            details.append("")
            details.append("Target Details:")
            for target in targets:
                details.append(f"  - Target ID: {target.target_id}")
                details.append(f"    Status: {target.status}")

        return [
            self.result(
                CheckStatus.PASSED,
                f"Found {len(targets)} target(s)",
                details=details,
                data={
                    "targets": [
                        {"target_id": t.target_id, "status": t.status}
                        for t in targets
                    ]
                },
            )
        ]


class TargetDetailsCheck(GatewayCheck):
    """Describes every target and checks that it is READY."""

    @property
    def name(self) -> str:
        return "Target Details"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        targets: List[GatewayTarget] = context.get("targets") or []
        if not targets:
            return [self.result(CheckStatus.SKIPPED, "No targets to inspect")]

        results: List[CheckResult] = []
        for summary in targets:
            results.extend(
                self._check_target(context["gateway_id"], summary.target_id)
            )
        return results

    def _check_target(self, gateway_id: str, target_id: str) -> List[CheckResult]:
        try:
            target = self.gateway_client.get_target(gateway_id, target_id)
        except AWS_ERRORS as e:
            return [
                self.result(
                    CheckStatus.FAILED,
                    f"Failed to get target details: {target_id}",
                    data={"target_id": target_id, "error": _error_message(e)},
                )
            ]

        ready_status = self.settings.get("gateway.ready_status")
        table = [
            f"Checking target: {target_id}",
            TABLE_RULE,
            f"| Target ID    | {target_id}",
            f"| Status       | {target.status}",
            f"| Gateway ARN  | {target.gateway_arn}",
            f"| Schema URI   | {target.schema_uri}",
            TABLE_RULE,
        ]
        data = {
            "target_id": target_id,
            "status": target.status,
            "gateway_arn": target.gateway_arn,
            "schema_uri": target.schema_uri,
        }

        if target.status == ready_status:
            results = [
                self.result(
                    CheckStatus.PASSED,
                    f"Target is {ready_status}",
                    details=table,
                    data=data,
                )
            ]
        else:
            results = [
                self.result(
                    CheckStatus.WARNING,
                    f"Target status: {target.status}",
                    details=table,
                    data=data,
                )
            ]

        if target.name is None:
            results.append(
                self.result(
                    CheckStatus.WARNING,
                    "Target name not set",
                    data={"target_id": target_id},
                )
            )
        return results


class CredentialAccessCheck(GatewayCheck):
    """Lists the policies attached to the gateway's service role.

    This only confirms that policies are attached; it does not evaluate
    whether they grant access to the credential provider.
    """

    @property
    def name(self) -> str:
        return "Credential Provider Access"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        gateway = context.get("gateway")
        if gateway is None or not gateway.role_arn:
            return [
                self.result(
                    CheckStatus.WARNING,
                    "Gateway has no service role configured",
                )
            ]

        role_name = role_name_from_arn(gateway.role_arn)
        results = [
            self.result(
                CheckStatus.INFO,
                f"Gateway Role: {gateway.role_arn}",
                data={"role_arn": gateway.role_arn, "role_name": role_name},
            )
        ]

        try:
            policies = self.gateway_client.list_attached_role_policies(role_name)
        except AWS_ERRORS as e:
            results.append(
                self.result(
                    CheckStatus.WARNING,
                    "Could not verify role policies",
                    data={"role_name": role_name, "error": _error_message(e)},
                )
            )
            return results

        if not policies:
            results.append(
                self.result(
                    CheckStatus.WARNING,
                    f"Role {role_name} has no attached policies",
                )
            )
            return results

        results.append(
            self.result(
                CheckStatus.PASSED,
                "Role has attached policies",
                details=[f"  - {p.name}: {p.arn}" for p in policies],
                data={
                    "policies": [{"name": p.name, "arn": p.arn} for p in policies]
                },
            )
        )
        results.append(
            self.result(
                CheckStatus.PASSED, "IAM permissions appear to be configured"
            )
        )
        return results


class StackStatusCheck(GatewayCheck):
    """Checks the CloudFormation stack that deployed the gateway targets.

    The stack name is derived from the gateway id, so a missing stack is
    reported as information only.
    """

    @property
    def name(self) -> str:
        return "CloudFormation Stack"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        stack_name = stack_name_for(
            context["gateway_id"], self.settings.get_stack_suffix()
        )
        results = [
            self.result(
                CheckStatus.INFO,
                f"Checking CloudFormation stack: {stack_name}",
                data={"stack_name": stack_name},
            )
        ]

        try:
            status = self.gateway_client.get_stack_status(stack_name)
        except ClientError as e:
            if "does not exist" in e.response.get("Error", {}).get("Message", ""):
                status = None
            else:
                results.append(
                    self.result(
                        CheckStatus.WARNING,
                        f"Could not check stack: {_error_message(e)}",
                    )
                )
                return results
        except (BotoCoreError, AWSClientError) as e:
            results.append(
                self.result(CheckStatus.WARNING, f"Could not check stack: {e}")
            )
            return results

        if status is None:
            results.append(
                self.result(
                    CheckStatus.INFO,
                    "Stack not found (this is OK if using different naming)",
                )
            )
            return results

        results.append(
            self.result(
                CheckStatus.PASSED,
                f"Stack exists with status: {status}",
                data={"stack_status": status},
            )
        )
        if status in self.settings.get("gateway.healthy_stack_statuses"):
            results.append(self.result(CheckStatus.PASSED, "Stack is healthy"))
        else:
            results.append(
                self.result(CheckStatus.WARNING, f"Stack status: {status}")
            )
        return results
