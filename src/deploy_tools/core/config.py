"""Configuration management for the deployment tools.

This module handles optional YAML settings loading, validation and
environment variable override support. Every setting has a default so the
tools run without any settings file.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import DeployToolsError


DEFAULT_CONFIG_FILE = "deploy-tools.yaml"

DEFAULTS: Dict[str, Any] = {
    "aws": {
        "region": None,
        "profile": "default",
    },
    "gateway": {
        "required_variables": [
            "GATEWAY_IDENTIFIER",
            "CREDENTIAL_PROVIDER_NAME",
            "AWS_REGION",
        ],
        "stack_suffix": "FootballAPITarget",
        "ready_status": "READY",
        "healthy_stack_statuses": ["CREATE_COMPLETE", "UPDATE_COMPLETE"],
        "build_command": ["npm", "run", "build"],
    },
    "cdk": {
        "source_dir": "lib",
        "output_dir": "cdk.out",
        "max_template_bytes": 51200,
        "max_resources": 200,
    },
}

# Expected type for every leaf setting; None means "str or null".
_SCHEMA: Dict[str, Any] = {
    "aws.region": None,
    "aws.profile": str,
    "gateway.required_variables": list,
    "gateway.stack_suffix": str,
    "gateway.ready_status": str,
    "gateway.healthy_stack_statuses": list,
    "gateway.build_command": list,
    "cdk.source_dir": str,
    "cdk.output_dir": str,
    "cdk.max_template_bytes": int,
    "cdk.max_resources": int,
}


class ConfigurationError(DeployToolsError):
    """Raised when configuration is invalid or missing."""

    pass


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Settings:
    """Settings with YAML loading, defaults and validation.

    Values come from three layers, later layers winning: built-in
    defaults, the YAML file, then AWS_REGION / AWS_PROFILE from the
    environment.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initialize settings.

        Args:
            config_path: Optional path to a YAML settings file. If None,
                        deploy-tools.yaml in the working directory is used
                        when it exists.
            environ: Environment mapping used for overrides, defaults to
                    os.environ

        Raises:
            ConfigurationError: When the settings file is invalid
        """
        self._environ = os.environ if environ is None else environ
        self._config_path = self._resolve_config_path(config_path)
        self._config: Dict[str, Any] = _merge(DEFAULTS, self._load_file())
        self._apply_environment_overrides()
        self._validate_configuration()

    @property
    def config_path(self) -> Optional[Path]:
        """Settings file in use, if any."""
        return self._config_path

    def _resolve_config_path(self, config_path: Optional[str]) -> Optional[Path]:
        """Resolve settings file path.

        Args:
            config_path: Optional explicit path

        Returns:
            Path to the settings file, or None when running on defaults

        Raises:
            ConfigurationError: When an explicit path does not exist
        """
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {path}"
                )
            return path

        path = Path(DEFAULT_CONFIG_FILE)
        return path if path.exists() else None

    def _load_file(self) -> Dict[str, Any]:
        """Load settings from the YAML file.

        Returns:
            Parsed settings, empty when no file is used

        Raises:
            ConfigurationError: When the YAML is invalid or unreadable
        """
        if self._config_path is None:
            return {}

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file {self._config_path}: {e}"
            )
        except IOError as e:
            raise ConfigurationError(
                f"Unable to read configuration file {self._config_path}: {e}"
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {self._config_path} must contain a mapping"
            )
        return data

    def _apply_environment_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        if self._environ.get("AWS_REGION"):
            self._set_nested_value("aws.region", self._environ["AWS_REGION"])

        if self._environ.get("AWS_PROFILE"):
            self._set_nested_value("aws.profile", self._environ["AWS_PROFILE"])

    def _validate_configuration(self) -> None:
        """Validate setting types.

        Raises:
            ConfigurationError: When a setting has the wrong type
        """
        for key_path, expected in _SCHEMA.items():
            value = self.get(key_path)
            if expected is None:
                if value is not None and not isinstance(value, str):
                    raise ConfigurationError(
                        f"Field '{key_path}' must be a string"
                    )
            elif expected is int:
                # bool is an int subclass and is never a valid threshold
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ConfigurationError(
                        f"Field '{key_path}' must be an integer"
                    )
                if value <= 0:
                    raise ConfigurationError(
                        f"Field '{key_path}' must be positive"
                    )
            elif expected is list:
                if not isinstance(value, list) or not all(
                    isinstance(item, str) for item in value
                ):
                    raise ConfigurationError(
                        f"Field '{key_path}' must be a list of strings"
                    )
            elif not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"Field '{key_path}' must be a non-empty string"
                )

        if not self.get("gateway.build_command"):
            raise ConfigurationError(
                "Field 'gateway.build_command' must not be empty"
            )

    def _set_nested_value(self, key_path: str, value: Any) -> None:
        """Set nested configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'aws.region')
            value: Value to set
        """
        keys = key_path.split(".")
        current = self._config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key_path: Dot-separated key path (e.g., 'cdk.max_resources')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        current = self._config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def set_override(self, key_path: str, value: Any) -> None:
        """Override a setting from the command line.

        None values are ignored so unset flags keep the configured value.
        """
        if value is not None:
            self._set_nested_value(key_path, value)

    def get_region(self) -> Optional[str]:
        """Get configured AWS region, None to use the session default."""
        return self.get("aws.region")

    def get_profile(self) -> str:
        """Get configured AWS profile name."""
        return self.get("aws.profile") or "default"

    def get_required_variables(self) -> List[str]:
        """Get variables an environment file must define."""
        return list(self.get("gateway.required_variables"))

    def get_stack_suffix(self) -> str:
        """Get the suffix appended to the gateway name to form a stack name."""
        return self.get("gateway.stack_suffix")

    def to_dict(self) -> Dict[str, Any]:
        """Get complete configuration as dictionary.

        Returns:
            Complete configuration dictionary
        """
        return copy.deepcopy(self._config)
