"""Pre-deployment validation for AWS CDK projects.

Synthesizes the project, scans its sources for common anti-patterns and
inspects the generated CloudFormation templates. Only a missing tool, a
missing package.json, a failed synthesis or an empty cdk.out is fatal;
anti-patterns and large templates are warnings.
"""

import json
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import Settings
from ..core.console import Reporter
from ..core.process import (
    CommandNotFoundError,
    WorkingDirectoryError,
    command_exists,
    run_command,
)
from ..core.validator import (
    BaseCheck,
    CheckReport,
    CheckResult,
    CheckRunner,
    CheckStatus,
)
from .rules import AntiPatternRule, RuleMatch, scan_sources


logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".template.json"

# Locations listed per anti-pattern before truncating
MAX_LOCATIONS = 5


class StackCheck(BaseCheck):
    """Base class for checks over a CDK project directory."""

    def __init__(self, project_root: Path, settings: Settings) -> None:
        self.project_root = project_root
        self.settings = settings


class CdkCliCheck(StackCheck):
    """Confirms the cdk CLI is installed."""

    @property
    def name(self) -> str:
        return "AWS CDK CLI"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        if not command_exists("cdk"):
            return [
                self.result(
                    CheckStatus.FAILED,
                    "AWS CDK CLI not found. Install with: npm install -g aws-cdk",
                    fatal=True,
                )
            ]
        return [self.result(CheckStatus.PASSED, "AWS CDK CLI found")]


class PackageJsonCheck(StackCheck):
    """Confirms the project root holds a package.json."""

    @property
    def name(self) -> str:
        return "Project Layout"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        if not (self.project_root / "package.json").is_file():
            return [
                self.result(
                    CheckStatus.FAILED,
                    "package.json not found in project root",
                    data={"project_root": str(self.project_root)},
                    fatal=True,
                )
            ]
        return [self.result(CheckStatus.PASSED, "package.json found")]


class SynthCheck(StackCheck):
    """Runs 'cdk synth --quiet' in the project root."""

    @property
    def name(self) -> str:
        return "CDK Synthesis"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        try:
            result = run_command(
                ["cdk", "synth", "--quiet"],
                cwd=str(self.project_root),
                capture=True,
            )
        except (CommandNotFoundError, WorkingDirectoryError) as e:
            return [self.result(CheckStatus.FAILED, str(e), fatal=True)]

        if not result.succeeded:
            logger.debug("cdk synth output:\n%s", result.output)
            return [
                self.result(
                    CheckStatus.FAILED,
                    "CDK synthesis failed",
                    details=[
                        "",
                        "Run 'cdk synth' for detailed error information",
                    ],
                    data={"returncode": result.returncode},
                    fatal=True,
                )
            ]
        return [self.result(CheckStatus.PASSED, "CDK synthesis successful")]


class AntiPatternCheck(StackCheck):
    """Scans CDK sources for common anti-patterns."""

    def __init__(
        self,
        project_root: Path,
        settings: Settings,
        rules: Optional[List[AntiPatternRule]] = None,
    ) -> None:
        super().__init__(project_root, settings)
        self.rules = rules

    @property
    def name(self) -> str:
        return "Common Issues"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        source_dir = self.project_root / self.settings.get("cdk.source_dir")
        matches = scan_sources(source_dir, self.rules)

        grouped: "OrderedDict[str, List[RuleMatch]]" = OrderedDict()
        rules: Dict[str, AntiPatternRule] = {}
        for match in matches:
            grouped.setdefault(match.rule.rule_id, []).append(match)
            rules[match.rule.rule_id] = match.rule

        results = []
        for rule_id, rule_matches in grouped.items():
            rule = rules[rule_id]
            locations = [
                m.location(self.project_root)
                for m in rule_matches[:MAX_LOCATIONS]
            ]
            if len(rule_matches) > MAX_LOCATIONS:
                locations.append(
                    f"... and {len(rule_matches) - MAX_LOCATIONS} more"
                )
            results.append(
                self.result(
                    CheckStatus.WARNING,
                    rule.format_message(len(rule_matches)),
                    details=[f"  {rule.hint}"]
                    + [f"    {loc}" for loc in locations],
                    data={"rule": rule_id, "count": len(rule_matches)},
                )
            )

        results.append(
            self.result(CheckStatus.PASSED, "Common issue checks completed")
        )
        return results


class TemplatesCheck(StackCheck):
    """Reports size and resource count of each synthesized template."""

    @property
    def name(self) -> str:
        return "Synthesized Templates"

    def run(self, context: Dict[str, Any]) -> List[CheckResult]:
        output_dir_name = self.settings.get("cdk.output_dir")
        output_dir = self.project_root / output_dir_name
        templates = (
            sorted(output_dir.rglob(f"*{TEMPLATE_SUFFIX}"))
            if output_dir.is_dir()
            else []
        )

        if not templates:
            return [
                self.result(
                    CheckStatus.FAILED,
                    f"No CloudFormation templates found in {output_dir_name}/",
                    fatal=True,
                )
            ]

        results = [
            self.result(
                CheckStatus.PASSED,
                f"Found {len(templates)} CloudFormation template(s)",
                data={"templates": [str(t) for t in templates]},
            )
        ]
        for template in templates:
            results.extend(self._check_template(template))
        return results

    def _check_template(self, template: Path) -> List[CheckResult]:
        stack_name = template.name[: -len(TEMPLATE_SUFFIX)]
        max_bytes = self.settings.get("cdk.max_template_bytes")
        max_resources = self.settings.get("cdk.max_resources")
        results = []

        size = template.stat().st_size
        if size > max_bytes:
            results.append(
                self.result(
                    CheckStatus.WARNING,
                    f"{stack_name}: Template size ({size} bytes) is large",
                    details=["  Consider using nested stacks to reduce size"],
                    data={"stack": stack_name, "size": size},
                )
            )

        count = count_resources(template)
        if count > max_resources:
            results.append(
                self.result(
                    CheckStatus.WARNING,
                    f"{stack_name}: High resource count ({count})",
                    details=["  Consider splitting into multiple stacks"],
                    data={"stack": stack_name, "resources": count},
                )
            )
        else:
            results.append(
                self.result(
                    CheckStatus.PASSED,
                    f"{stack_name}: {count} resources",
                    data={"stack": stack_name, "resources": count},
                )
            )
        return results


def count_resources(template: Path) -> int:
    """Count the Resources of a CloudFormation template.

    Returns:
        Number of resources, 0 when the template cannot be parsed
    """
    try:
        with open(template, "r", encoding="utf-8") as f:
            body = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Unable to parse template %s: %s", template, e)
        return 0

    resources = body.get("Resources") if isinstance(body, dict) else None
    return len(resources) if isinstance(resources, dict) else 0


class StackValidator:
    """Validates a CDK project before deployment."""

    def __init__(
        self, project_root: str, settings: Settings, reporter: Reporter
    ) -> None:
        """Initialize stack validator.

        Args:
            project_root: CDK project directory
            settings: Loaded settings
            reporter: Console reporter
        """
        self.project_root = Path(project_root).resolve()
        self.settings = settings
        self.reporter = reporter

    def build_checks(self) -> List[BaseCheck]:
        """Create the checks in the order they run."""
        check_types = [
            CdkCliCheck,
            PackageJsonCheck,
            SynthCheck,
            AntiPatternCheck,
            TemplatesCheck,
        ]
        return [
            check_type(self.project_root, self.settings)
            for check_type in check_types
        ]

    def validate(self) -> CheckReport:
        """Run every stack check.

        Returns:
            CheckReport; its exit_code is 1 only on a fatal failure
        """
        self.reporter.line("AWS CDK Stack Validation")
        self.reporter.line("============================")

        runner = CheckRunner(self.build_checks(), reporter=self.reporter)
        report = runner.run(str(self.project_root))

        self.reporter.line()
        self.reporter.line("============================")
        if report.aborted:
            self.reporter.error("✗ Validation failed")
            self.reporter.line()
            self.reporter.error("Please fix the errors above before deploying")
        else:
            self.reporter.info("✓ Validation passed")
            self.reporter.line()
            self.reporter.info("Stack is ready for deployment")
        return report
