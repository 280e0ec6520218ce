"""Command line entry points for the deployment tools.

Three commands are installed:

  deploy-gateway-target ENV_FILE          Build and deploy a gateway target
  validate-gateway-deployment GATEWAY_ID  Check a deployed gateway
  validate-cdk-stack [PROJECT_DIR]        Synthesize and lint a CDK project

Exit codes: 0 on success (warnings included), 1 on a hard failure, 130
when interrupted.
"""

import argparse
import json
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console

from . import __version__
from .cdk.stack_validator import StackValidator
from .core.aws_client import AWSClientManager, session_profile
from .core.config import ConfigurationError, Settings
from .core.console import Reporter
from .core.logging_setup import configure_logging
from .core.validator import CheckReport
from .gateway.deployer import GatewayTargetDeployer
from .gateway.validator import GatewayDeploymentValidator


logger = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser(prog: str, description: str, epilog: str) -> ArgumentParser:
    parser = ArgumentParser(
        prog=prog,
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    parser.add_argument(
        "--config", help="Path to settings file (default: deploy-tools.yaml)"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Disable colored output"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def parse_deploy_arguments(
    argv: Optional[List[str]] = None,
) -> argparse.Namespace:
    """Parse deploy-gateway-target arguments."""
    parser = _build_parser(
        "deploy-gateway-target",
        "Deploy an AgentCore gateway target from an environment file",
        """
Examples:
  %(prog)s .env.production
  %(prog)s .env.staging --project-dir ./gateway-targets
        """,
    )
    parser.add_argument("env_file", help="Path to KEY=VALUE environment file")
    parser.add_argument(
        "--project-dir", default=".", help="CDK project directory (default: .)"
    )
    return parser.parse_args(argv)


def parse_validate_gateway_arguments(
    argv: Optional[List[str]] = None,
) -> argparse.Namespace:
    """Parse validate-gateway-deployment arguments."""
    parser = _build_parser(
        "validate-gateway-deployment",
        "Validate an AgentCore gateway and its targets",
        """
Examples:
  %(prog)s xiaozhi-mfyvjzuqpk
  %(prog)s xiaozhi-mfyvjzuqpk --region us-east-1 --json
        """,
    )
    parser.add_argument("gateway_id", help="Gateway identifier")
    parser.add_argument("--region", help="AWS region (default: AWS_REGION)")
    parser.add_argument("--profile", help="AWS profile (default: AWS_PROFILE)")
    parser.add_argument(
        "--stack-suffix",
        help="Suffix of the target stack name (default: FootballAPITarget)",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    return parser.parse_args(argv)


def parse_validate_stack_arguments(
    argv: Optional[List[str]] = None,
) -> argparse.Namespace:
    """Parse validate-cdk-stack arguments."""
    parser = _build_parser(
        "validate-cdk-stack",
        "Synthesize a CDK project and check it for common issues",
        """
Examples:
  %(prog)s                 # Validate the project in the current directory
  %(prog)s ./infra --json
        """,
    )
    parser.add_argument(
        "project_dir",
        nargs="?",
        default=".",
        help="CDK project directory (default: current directory)",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    return parser.parse_args(argv)


def _make_reporter(args: argparse.Namespace) -> Reporter:
    color = not args.no_color
    if getattr(args, "json", False):
        # Keep stdout for the JSON document
        console = Console(
            stderr=True, no_color=not color, highlight=False, soft_wrap=True
        )
        return Reporter(console=console, color=color)
    return Reporter(color=color)


def _load_settings(
    config_path: Optional[str], overrides: Optional[Dict[str, Any]] = None
) -> Settings:
    settings = Settings(config_path)
    for key_path, value in (overrides or {}).items():
        settings.set_override(key_path, value)
    logger.debug("Effective settings: %s", settings.to_dict())
    return settings


def _print_json(report: CheckReport) -> None:
    print(json.dumps(report.to_dict(), indent=2, default=str))


def _run(command: Callable[[Reporter], int], reporter: Reporter) -> int:
    """Run a command body with the shared error handling."""
    try:
        return command(reporter)
    except ConfigurationError as e:
        reporter.error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        reporter.error("Operation cancelled by user.")
        return 130
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        reporter.error(f"Unexpected error: {e}")
        return 1


def deploy_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for deploy-gateway-target.

    Returns:
        Exit code (0 for success, 1 for any failure)
    """
    args = parse_deploy_arguments(argv)
    configure_logging(args.verbose)
    reporter = _make_reporter(args)

    def command(reporter: Reporter) -> int:
        settings = _load_settings(args.config)
        deployer = GatewayTargetDeployer(settings, reporter)
        return deployer.deploy(args.env_file, args.project_dir)

    return _run(command, reporter)


def validate_gateway_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for validate-gateway-deployment.

    Returns:
        Exit code, 1 only when the gateway does not exist
    """
    args = parse_validate_gateway_arguments(argv)
    configure_logging(args.verbose)
    reporter = _make_reporter(args)

    def command(reporter: Reporter) -> int:
        settings = _load_settings(
            args.config,
            {
                "aws.region": args.region,
                "aws.profile": args.profile,
                "gateway.stack_suffix": args.stack_suffix,
            },
        )

        aws_client = AWSClientManager(
            profile_name=session_profile(settings.get_profile()),
            region_name=settings.get_region(),
        )
        validator = GatewayDeploymentValidator(aws_client, settings, reporter)
        report = validator.validate(args.gateway_id)
        if args.json:
            _print_json(report)
        return report.exit_code

    return _run(command, reporter)


def validate_stack_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for validate-cdk-stack.

    Returns:
        Exit code, 0 when synthesis succeeds even if warnings were printed
    """
    args = parse_validate_stack_arguments(argv)
    configure_logging(args.verbose)
    reporter = _make_reporter(args)

    def command(reporter: Reporter) -> int:
        settings = _load_settings(args.config)
        validator = StackValidator(args.project_dir, settings, reporter)
        report = validator.validate()
        if args.json:
            _print_json(report)
        return report.exit_code

    return _run(command, reporter)

