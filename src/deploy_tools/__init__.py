"""AgentCore and CDK deployment tools - Main Package.

This package provides command line tools for deploying AgentCore gateway
targets and validating gateway deployments and CDK stacks.
"""

__version__ = "1.0.0"
__author__ = "Deployment Tools Team"
