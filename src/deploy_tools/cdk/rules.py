"""Text-pattern rules for common CDK anti-patterns.

Rules match single source lines with regular expressions. They are
heuristics: a match is always reported as a warning, never as an error.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Pattern


logger = logging.getLogger(__name__)

EXCLUDED_DIRS = {"node_modules"}


@dataclass(frozen=True)
class AntiPatternRule:
    """A source pattern that should be reported."""

    rule_id: str
    pattern: Pattern[str]
    message: str
    hint: str
    exclude: Optional[Pattern[str]] = None
    # Report the number of matches in the message ("{count}")
    counted: bool = False

    def matches(self, line: str) -> bool:
        """Check whether a source line triggers this rule."""
        if not self.pattern.search(line):
            return False
        return self.exclude is None or not self.exclude.search(line)

    def format_message(self, count: int) -> str:
        return self.message.format(count=count) if self.counted else self.message


@dataclass
class RuleMatch:
    """A line that triggered a rule."""

    rule: AntiPatternRule
    path: Path
    line_number: int
    line: str

    def location(self, root: Path) -> str:
        try:
            path = self.path.relative_to(root)
        except ValueError:
            path = self.path
        return f"{path}:{self.line_number}"


_GENERATED_NAMES_HINT = "Consider letting CDK generate names automatically"

DEFAULT_RULES: List[AntiPatternRule] = [
    AntiPatternRule(
        rule_id="hardcoded-function-name",
        pattern=re.compile(r"functionName:"),
        message="Found potential hardcoded Lambda function names (functionName:)",
        hint=_GENERATED_NAMES_HINT,
    ),
    AntiPatternRule(
        rule_id="hardcoded-bucket-name",
        pattern=re.compile(r"bucketName:"),
        message="Found potential hardcoded S3 bucket names (bucketName:)",
        hint=_GENERATED_NAMES_HINT,
    ),
    AntiPatternRule(
        rule_id="hardcoded-table-name",
        pattern=re.compile(r"tableName:"),
        message="Found potential hardcoded DynamoDB table names (tableName:)",
        hint=_GENERATED_NAMES_HINT,
    ),
    AntiPatternRule(
        rule_id="wildcard-iam-actions",
        pattern=re.compile(re.escape("actions: ['*']")),
        message="Found overly broad IAM permissions (actions: ['*'])",
        hint="Use grant methods for least privilege access",
    ),
    AntiPatternRule(
        rule_id="wildcard-iam-resources",
        pattern=re.compile(re.escape("resources: ['*']")),
        message="Found overly broad IAM resources (resources: ['*'])",
        hint="Specify explicit resource ARNs when possible",
    ),
    AntiPatternRule(
        rule_id="l1-construct",
        pattern=re.compile(r"new Cfn"),
        exclude=re.compile(r"CfnOutput"),
        message="Found {count} L1 (Cfn*) construct(s)",
        hint="Consider using higher-level L2/L3 constructs when available",
        counted=True,
    ),
    AntiPatternRule(
        rule_id="plain-lambda-function",
        pattern=re.compile(r"new lambda\.Function\b"),
        message="Found lambda.Function usage",
        hint="Consider using NodejsFunction or PythonFunction for automatic bundling",
    ),
]


def iter_source_files(source_dir: Path) -> Iterator[Path]:
    """Yield every file under source_dir, skipping excluded directories."""
    if not source_dir.is_dir():
        return
    for path in sorted(source_dir.rglob("*")):
        relative = path.relative_to(source_dir)
        if EXCLUDED_DIRS.intersection(relative.parts):
            continue
        if path.is_file():
            yield path


def scan_sources(
    source_dir: Path, rules: Optional[List[AntiPatternRule]] = None
) -> List[RuleMatch]:
    """Scan source files for rule matches.

    Args:
        source_dir: Directory to scan recursively
        rules: Rules to apply, defaults to DEFAULT_RULES

    Returns:
        Matches in file order, then line order, then rule order
    """
    rules = DEFAULT_RULES if rules is None else rules
    matches: List[RuleMatch] = []

    for path in iter_source_files(source_dir):
        try:
            text = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            continue

        for line_number, line in enumerate(text.splitlines(), 1):
            for rule in rules:
                if rule.matches(line):
                    matches.append(RuleMatch(rule, path, line_number, line))

    return matches
