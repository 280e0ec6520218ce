"""Base exception for the deployment tools."""


class DeployToolsError(Exception):
    """Base class for all errors raised by the deployment tools."""

    pass
