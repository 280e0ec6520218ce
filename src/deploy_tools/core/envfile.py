"""Environment file loading for deployments.

Environment files hold KEY=VALUE lines describing one deployment target
(e.g. .env.production). Parsing follows python-dotenv rules for comments,
quoting and 'export' prefixes.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

from dotenv import dotenv_values

from .errors import DeployToolsError


class EnvironmentFileError(DeployToolsError):
    """Raised when an environment file cannot be loaded."""

    pass


def require_environment_file(path: Union[str, Path]) -> Path:
    """Return the environment file path, raising if it does not exist."""
    env_path = Path(path)
    if not env_path.is_file():
        raise EnvironmentFileError(f"Environment file not found: {path}")
    return env_path


def load_environment_file(path: Union[str, Path]) -> Dict[str, str]:
    """Load KEY=VALUE pairs from an environment file.

    Args:
        path: Path to the environment file

    Returns:
        Mapping of variable names to values. Keys declared without a value
        map to an empty string.

    Raises:
        EnvironmentFileError: When the file does not exist or is unreadable
    """
    env_path = require_environment_file(path)

    try:
        values = dotenv_values(env_path, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EnvironmentFileError(
            f"Unable to read environment file {path}: {e}"
        )

    return {key: value or "" for key, value in values.items()}


def missing_variables(
    env: Mapping[str, Optional[str]], required: Iterable[str]
) -> List[str]:
    """Return required variables that are unset or empty, in order."""
    return [name for name in required if not env.get(name)]


def derive_gateway_name(gateway_identifier: str) -> str:
    """Extract the gateway name prefix from a gateway identifier.

    Gateway identifiers are '<name>-<suffix>' (e.g. 'xiaozhi-mfyvjzuqpk');
    the name is everything before the first hyphen.
    """
    return gateway_identifier.split("-", 1)[0]
