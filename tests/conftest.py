"""Shared fixtures for deployment tools tests."""

import io

import pytest
from rich.console import Console

from deploy_tools.core.config import Settings
from deploy_tools.core.console import Reporter


class CapturedReporter:
    """Reporter writing to in-memory buffers."""

    def __init__(self) -> None:
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.reporter = Reporter(
            console=self._console(self.stdout),
            error_console=self._console(self.stderr),
        )

    @staticmethod
    def _console(buffer: io.StringIO) -> Console:
        return Console(
            file=buffer,
            no_color=True,
            highlight=False,
            soft_wrap=True,
            width=200,
        )

    @property
    def out(self) -> str:
        return self.stdout.getvalue()

    @property
    def err(self) -> str:
        return self.stderr.getvalue()


@pytest.fixture
def captured():
    """Reporter with captured stdout and stderr."""
    return CapturedReporter()


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Default settings, isolated from the caller's environment."""
    monkeypatch.chdir(tmp_path)
    return Settings(environ={})
