"""Typed records for AgentCore control plane responses."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


def role_name_from_arn(role_arn: str) -> str:
    """Extract the role name from an IAM role ARN.

    'arn:aws:iam::123456789012:role/service-role/GatewayRole' yields
    'GatewayRole'; role paths are dropped.
    """
    resource = role_arn.split(":", 5)[-1]
    return resource.rsplit("/", 1)[-1]


def stack_name_for(gateway_identifier: str, suffix: str) -> str:
    """Build the CloudFormation stack name for a gateway's target stack."""
    return f"{gateway_identifier.split('-', 1)[0]}{suffix}"


@dataclass
class Gateway:
    """An AgentCore gateway."""

    gateway_id: str
    name: Optional[str] = None
    arn: Optional[str] = None
    status: Optional[str] = None
    role_arn: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "Gateway":
        return cls(
            gateway_id=response.get("gatewayId", ""),
            name=response.get("name"),
            arn=response.get("gatewayArn"),
            status=response.get("status"),
            role_arn=response.get("roleArn"),
            url=response.get("gatewayUrl"),
        )


@dataclass
class GatewayTarget:
    """A gateway target, from either a list summary or a full description."""

    target_id: str
    status: Optional[str] = None
    name: Optional[str] = None
    gateway_arn: Optional[str] = None
    schema_uri: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "GatewayTarget":
        return cls(
            target_id=response.get("targetId", ""),
            status=response.get("status"),
            name=response.get("name") or None,
            gateway_arn=response.get("gatewayArn"),
            schema_uri=_schema_uri(response.get("targetConfiguration") or {}),
            description=response.get("description"),
        )


def _schema_uri(target_configuration: Dict[str, Any]) -> Optional[str]:
    # Only MCP OpenAPI and Smithy targets carry an S3 schema location.
    mcp = target_configuration.get("mcp") or {}
    for schema_key in ("openApiSchema", "smithyModel"):
        uri = ((mcp.get(schema_key) or {}).get("s3") or {}).get("uri")
        if uri:
            return uri
    return None


@dataclass
class AttachedPolicy:
    """A managed policy attached to an IAM role."""

    name: str
    arn: str

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "AttachedPolicy":
        return cls(
            name=response.get("PolicyName", ""),
            arn=response.get("PolicyArn", ""),
        )
