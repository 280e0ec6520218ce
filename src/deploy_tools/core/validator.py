"""Checks framework shared by the gateway and CDK validators.

A validation run is an ordered list of independent checks. Each check
returns a CheckResult; a result flagged as fatal stops the run and makes
the command exit with status 1. Every other outcome, warnings and failed
non-fatal checks included, is reported but leaves the exit status at 0.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)


class CheckStatus(Enum):
    """Check result status."""

    PASSED = "PASSED"
    WARNING = "WARNING"
    FAILED = "FAILED"
    INFO = "INFO"
    SKIPPED = "SKIPPED"


@dataclass
class CheckResult:
    """Result of a single check."""

    name: str
    status: CheckStatus
    message: str
    details: List[str] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)
    fatal: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the result for JSON output."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "details": list(self.details),
            "data": self.data,
            "fatal": self.fatal,
        }


@dataclass
class CheckReport:
    """Ordered results of a validation run."""

    subject: str
    results: List[CheckResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def passed(self) -> bool:
        """True when no check failed."""
        return not any(r.status == CheckStatus.FAILED for r in self.results)

    @property
    def warnings(self) -> List[CheckResult]:
        """Results with WARNING status."""
        return [r for r in self.results if r.status == CheckStatus.WARNING]

    @property
    def failures(self) -> List[CheckResult]:
        """Results with FAILED status."""
        return [r for r in self.results if r.status == CheckStatus.FAILED]

    @property
    def exit_code(self) -> int:
        """Process exit status: 1 only when a fatal check stopped the run."""
        return 1 if self.aborted else 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the report for JSON output."""
        return {
            "subject": self.subject,
            "passed": self.passed,
            "aborted": self.aborted,
            "exit_code": self.exit_code,
            "results": [r.to_dict() for r in self.results],
        }


class BaseCheck(ABC):
    """Base class for all checks.

    Checks share a context dictionary so that a later check can reuse an
    API response fetched by an earlier one.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get check name."""
        pass

    @abstractmethod
    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        """Perform the check.

        Args:
            context: Mutable state shared between checks of one run

        Returns:
            One or more CheckResult objects
        """
        pass

    def result(
        self,
        status: CheckStatus,
        message: str,
        details: Optional[List[str]] = None,
        data: Optional[Dict[str, Any]] = None,
        fatal: bool = False,
    ) -> CheckResult:
        """Build a CheckResult named after this check."""
        return CheckResult(
            name=self.name,
            status=status,
            message=message,
            details=details or [],
            data=data or {},
            fatal=fatal,
        )


class CheckRunner:
    """Runs checks in order and collects their results."""

    def __init__(self, checks: List[BaseCheck], reporter=None) -> None:
        """Initialize check runner.

        Args:
            checks: Checks to run, in order
            reporter: Optional Reporter that prints each check as it runs
        """
        self.checks = checks
        self.reporter = reporter

    def run(
        self, subject: str, context: Optional[Dict[str, Any]] = None
    ) -> CheckReport:
        """Run all checks until one returns a fatal result.

        Args:
            subject: What is being validated (gateway id, project dir)
            context: Initial shared context

        Returns:
            CheckReport with every collected result
        """
        report = CheckReport(subject=subject)
        context = {} if context is None else context

        for check in self.checks:
            if self.reporter is not None:
                self.reporter.section(check.name)

            try:
                results = check.run(context)
            except Exception as e:
                logger.exception("Check %s raised", check.name)
                results = [
                    CheckResult(
                        name=check.name,
                        status=CheckStatus.FAILED,
                        message=f"Check error: {e}",
                    )
                ]

            for result in results:
                report.results.append(result)
                if self.reporter is not None:
                    self.reporter.report(result)

            if any(r.fatal for r in results):
                report.aborted = True
                break

        return report
