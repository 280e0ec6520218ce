"""Read-only access to AgentCore gateways and related AWS resources.

This module wraps the bedrock-agentcore-control, IAM and CloudFormation
clients used by gateway deployment and validation. botocore ClientError
propagates to the caller, which decides whether it is fatal.
"""

import logging
from typing import List, Optional

from ..core.aws_client import AWSClientManager
from .models import AttachedPolicy, Gateway, GatewayTarget


logger = logging.getLogger(__name__)

AGENTCORE_CONTROL_SERVICE = "bedrock-agentcore-control"


class GatewayClient:
    """Gateway, IAM and CloudFormation lookups for one region."""

    def __init__(self, aws_client: AWSClientManager) -> None:
        """Initialize gateway client.

        Args:
            aws_client: Configured AWS client manager
        """
        self.aws_client = aws_client

    def _control(self):
        return self.aws_client.get_client(AGENTCORE_CONTROL_SERVICE)

    def get_gateway(self, gateway_identifier: str) -> Gateway:
        """Describe a gateway.

        Args:
            gateway_identifier: Gateway id (e.g. 'xiaozhi-mfyvjzuqpk')

        Returns:
            Gateway record

        Raises:
            ClientError: When the gateway does not exist or access is denied
        """
        response = self._control().get_gateway(
            gatewayIdentifier=gateway_identifier
        )
        return Gateway.from_response(response)

    def list_targets(self, gateway_identifier: str) -> List[GatewayTarget]:
        """List every target of a gateway, following pagination.

        Args:
            gateway_identifier: Gateway id

        Returns:
            Target summaries in API order
        """
        control = self._control()
        targets: List[GatewayTarget] = []
        next_token: Optional[str] = None

        while True:
            kwargs = {"gatewayIdentifier": gateway_identifier}
            if next_token:
                kwargs["nextToken"] = next_token
            response = control.list_gateway_targets(**kwargs)
            targets.extend(
                GatewayTarget.from_response(item)
                for item in response.get("items", [])
            )
            next_token = response.get("nextToken")
            if not next_token:
                break

        logger.debug(
            "Gateway %s has %d target(s)", gateway_identifier, len(targets)
        )
        return targets

    def get_target(
        self, gateway_identifier: str, target_id: str
    ) -> GatewayTarget:
        """Describe one gateway target."""
        response = self._control().get_gateway_target(
            gatewayIdentifier=gateway_identifier, targetId=target_id
        )
        return GatewayTarget.from_response(response)

    def list_attached_role_policies(self, role_name: str) -> List[AttachedPolicy]:
        """List managed policies attached to an IAM role."""
        iam_client = self.aws_client.get_client("iam")
        paginator = iam_client.get_paginator("list_attached_role_policies")

        policies: List[AttachedPolicy] = []
        for page in paginator.paginate(RoleName=role_name):
            policies.extend(
                AttachedPolicy.from_response(policy)
                for policy in page.get("AttachedPolicies", [])
            )
        return policies

    def get_stack_status(self, stack_name: str) -> Optional[str]:
        """Get a CloudFormation stack's status.

        Returns:
            StackStatus of the first matching stack, None if the response
            lists no stacks

        Raises:
            ClientError: When the stack does not exist
        """
        cfn_client = self.aws_client.get_client("cloudformation")
        response = cfn_client.describe_stacks(StackName=stack_name)
        stacks = response.get("Stacks", [])
        if not stacks:
            return None
        return stacks[0].get("StackStatus")
