"""Unit tests for the checks framework."""

from unittest.mock import Mock

from deploy_tools.core.validator import (
    BaseCheck,
    CheckReport,
    CheckResult,
    CheckRunner,
    CheckStatus,
)


class StaticCheck(BaseCheck):
    """Check returning preset results."""

    def __init__(self, name, *results):
        self._name = name
        self._results = results
        self.calls = 0

    @property
    def name(self):
        return self._name

    def run(self, context):
        self.calls += 1
        context.setdefault("seen", []).append(self._name)
        return [
            self.result(status, message, fatal=fatal)
            for status, message, fatal in self._results
        ]


class BrokenCheck(BaseCheck):
    """Check that raises."""

    @property
    def name(self):
        return "Broken"

    def run(self, context):
        raise RuntimeError("boom")


class TestCheckRunner:
    """Test cases for CheckRunner."""

    def test_runs_all_checks_in_order(self):
        """Test every check runs and shares context."""
        first = StaticCheck("First", (CheckStatus.PASSED, "ok", False))
        second = StaticCheck("Second", (CheckStatus.WARNING, "careful", False))
        context = {}

        report = CheckRunner([first, second]).run("subject", context)

        assert [r.name for r in report.results] == ["First", "Second"]
        assert context["seen"] == ["First", "Second"]
        assert report.passed
        assert not report.aborted
        assert report.exit_code == 0

    def test_stops_after_fatal_result(self):
        """Test a fatal result stops the run with exit code 1."""
        first = StaticCheck("First", (CheckStatus.FAILED, "missing", True))
        second = StaticCheck("Second", (CheckStatus.PASSED, "ok", False))

        report = CheckRunner([first, second]).run("subject")

        assert second.calls == 0
        assert report.aborted
        assert report.exit_code == 1
        assert not report.passed

    def test_non_fatal_failure_keeps_exit_zero(self):
        """Test failed advisory checks do not change the exit code."""
        first = StaticCheck("First", (CheckStatus.FAILED, "broken", False))
        second = StaticCheck("Second", (CheckStatus.PASSED, "ok", False))

        report = CheckRunner([first, second]).run("subject")

        assert second.calls == 1
        assert not report.passed
        assert report.exit_code == 0
        assert len(report.failures) == 1

    def test_exception_becomes_failed_result(self):
        """Test an exception in one check does not hide the others."""
        after = StaticCheck("After", (CheckStatus.PASSED, "ok", False))

        report = CheckRunner([BrokenCheck(), after]).run("subject")

        assert report.results[0].status == CheckStatus.FAILED
        assert "boom" in report.results[0].message
        assert after.calls == 1
        assert report.exit_code == 0

    def test_reporter_receives_sections_and_results(self):
        """Test the reporter is called per check and per result."""
        reporter = Mock()
        check = StaticCheck(
            "Only",
            (CheckStatus.PASSED, "one", False),
            (CheckStatus.WARNING, "two", False),
        )

        CheckRunner([check], reporter=reporter).run("subject")

        reporter.section.assert_called_once_with("Only")
        assert reporter.report.call_count == 2


class TestCheckReport:
    """Test cases for CheckReport."""

    def test_to_dict(self):
        """Test report serialization."""
        report = CheckReport(
            subject="gw-1",
            results=[
                CheckResult(
                    name="A",
                    status=CheckStatus.WARNING,
                    message="careful",
                    details=["line"],
                    data={"k": "v"},
                )
            ],
        )

        data = report.to_dict()

        assert data["subject"] == "gw-1"
        assert data["passed"] is True
        assert data["exit_code"] == 0
        assert data["results"][0] == {
            "name": "A",
            "status": "WARNING",
            "message": "careful",
            "details": ["line"],
            "data": {"k": "v"},
            "fatal": False,
        }

    def test_warnings(self):
        """Test warnings are collected from the results."""
        report = CheckReport(
            subject="s",
            results=[
                CheckResult("A", CheckStatus.WARNING, "w"),
                CheckResult("B", CheckStatus.PASSED, "p"),
                CheckResult("C", CheckStatus.INFO, "i"),
            ],
        )

        assert [r.name for r in report.warnings] == ["A"]
