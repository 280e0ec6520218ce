"""Subprocess helpers for build and CDK commands.

Commands run synchronously with no timeout and no retry; the caller decides
whether a non-zero exit is fatal.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import DeployToolsError


logger = logging.getLogger(__name__)


class CommandNotFoundError(DeployToolsError):
    """Raised when a required executable is not on PATH."""

    pass


class WorkingDirectoryError(DeployToolsError):
    """Raised when a command's working directory does not exist."""

    pass


@dataclass
class CommandResult:
    """Outcome of an external command."""

    args: List[str]
    returncode: int
    output: str = ""

    @property
    def succeeded(self) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0


def command_exists(name: str) -> bool:
    """Check whether an executable is available on PATH."""
    return shutil.which(name) is not None


def run_command(
    args: Sequence[str],
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
    capture: bool = False,
) -> CommandResult:
    """Run an external command and wait for it to finish.

    Args:
        args: Command and arguments
        cwd: Working directory for the command
        env: Full environment for the child process, defaults to inherited
        capture: Capture combined stdout/stderr instead of streaming it to
                the terminal

    Returns:
        CommandResult with the exit status and captured output

    Raises:
        CommandNotFoundError: When the executable does not exist
        WorkingDirectoryError: When cwd is not a directory
    """
    args = list(args)
    if cwd and not Path(cwd).is_dir():
        raise WorkingDirectoryError(f"Project directory not found: {cwd}")
    logger.debug("Running %s in %s", " ".join(args), cwd or ".")

    try:
        if capture:
            completed = subprocess.run(
                args,
                cwd=cwd,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        else:
            completed = subprocess.run(args, cwd=cwd, env=env)
    except FileNotFoundError as e:
        raise CommandNotFoundError(f"Command not found: {args[0]}") from e

    logger.debug("%s exited with %s", args[0], completed.returncode)
    return CommandResult(
        args=args,
        returncode=completed.returncode,
        output=(completed.stdout or "") if capture else "",
    )
