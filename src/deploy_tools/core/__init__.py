"""Core components for the deployment tools.

This module contains the foundational components including AWS client
management, configuration handling, the checks framework, console output
and subprocess helpers.
"""
