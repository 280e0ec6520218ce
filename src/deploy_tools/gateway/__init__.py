"""AgentCore gateway deployment and validation.

This package deploys gateway targets from an environment file and checks a
deployed gateway, its targets, its IAM role and its CloudFormation stack.
"""
