"""AWS CDK stack validation.

This package synthesizes a CDK project, scans its sources for common
anti-patterns and reports on the generated CloudFormation templates.
"""
