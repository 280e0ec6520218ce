"""Gateway target deployment from an environment file.

Loads one environment file describing a gateway, validates it, resolves the
AWS account, builds the CDK project and deploys it. Every failure is fatal
and immediate; nothing is retried.
"""

import logging
import os
from typing import Callable, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..core.aws_client import AWSClientError, AWSClientManager, session_profile
from ..core.config import Settings
from ..core.console import Reporter
from ..core.envfile import (
    EnvironmentFileError,
    derive_gateway_name,
    load_environment_file,
    missing_variables,
    require_environment_file,
)
from ..core.process import (
    CommandNotFoundError,
    WorkingDirectoryError,
    run_command,
)
from .client import GatewayClient


logger = logging.getLogger(__name__)

ClientFactory = Callable[[Optional[str], Optional[str]], AWSClientManager]


def _default_client_factory(
    profile_name: Optional[str], region_name: Optional[str]
) -> AWSClientManager:
    return AWSClientManager(profile_name=profile_name, region_name=region_name)


class GatewayTargetDeployer:
    """Deploys a gateway target CDK project for one environment."""

    def __init__(
        self,
        settings: Settings,
        reporter: Reporter,
        client_factory: Optional[ClientFactory] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> None:
        """Initialize gateway target deployer.

        Args:
            settings: Loaded settings
            reporter: Console reporter
            client_factory: Builds an AWSClientManager from profile and
                           region, overridable for tests
            environ: Base environment for child processes, defaults to
                    os.environ
        """
        self.settings = settings
        self.reporter = reporter
        self.client_factory = client_factory or _default_client_factory
        self.environ = dict(os.environ if environ is None else environ)

    def deploy(self, env_file: str, project_dir: str = ".") -> int:
        """Run the full deployment.

        Args:
            env_file: Path to the KEY=VALUE environment file
            project_dir: CDK project directory to build and deploy

        Returns:
            Exit code, 0 on success and 1 on any failure
        """
        try:
            require_environment_file(env_file)
            self.reporter.info(f"Loading environment from: {env_file}")
            env = load_environment_file(env_file)
        except EnvironmentFileError as e:
            self.reporter.error(str(e))
            return 1

        required = self.settings.get_required_variables()
        for name in missing_variables(env, required):
            self.reporter.error(
                f"Required environment variable not set: {name}"
            )
            return 1

        profile = env.get("AWS_PROFILE") or self.settings.get_profile()
        region = env.get("AWS_REGION") or self.settings.get_region()
        gateway_id = env.get("GATEWAY_IDENTIFIER", "")

        self.reporter.info("Getting AWS account ID...")
        aws_client = self.client_factory(
            session_profile(profile, self.environ), region
        )
        try:
            account_id = aws_client.get_account_id()
        except AWSClientError as e:
            logger.debug("Account lookup failed: %s", e)
            account_id = ""
        if not account_id:
            self.reporter.error("Failed to get AWS account ID")
            return 1

        self.reporter.info(f"Account ID: {account_id}")
        self.reporter.info(f"Gateway: {gateway_id}")
        self.reporter.info(
            f"Credential Provider: {env.get('CREDENTIAL_PROVIDER_NAME', '')}"
        )
        self.reporter.info(f"Region: {region}")

        gateway_name = env.get("GATEWAY_NAME")
        if not gateway_name:
            gateway_name = derive_gateway_name(gateway_id)
            self.reporter.info(f"Auto-extracted gateway name: {gateway_name}")

        child_env = dict(self.environ)
        child_env.update(env)
        child_env["CDK_DEFAULT_ACCOUNT"] = account_id
        child_env["GATEWAY_NAME"] = gateway_name

        if not self._build(project_dir, child_env):
            return 1

        if not self._cdk_deploy(project_dir, child_env, profile):
            return 1

        self.reporter.info("Deployment successful!")
        self._print_details(env, gateway_name, region)
        self._print_targets(aws_client, gateway_id)
        return 0

    def _build(self, project_dir: str, env: Dict[str, str]) -> bool:
        self.reporter.info("Building project...")
        build_command = self.settings.get("gateway.build_command")
        try:
            result = run_command(build_command, cwd=project_dir, env=env)
        except (CommandNotFoundError, WorkingDirectoryError) as e:
            self.reporter.error(str(e))
            return False

        if not result.succeeded:
            self.reporter.error("Build failed!")
            return False

        self.reporter.info("Build successful!")
        return True

    def _cdk_deploy(
        self, project_dir: str, env: Dict[str, str], profile: str
    ) -> bool:
        self.reporter.info("Deploying to AWS...")
        command = [
            "cdk",
            "deploy",
            "--profile",
            profile,
            "--require-approval",
            "never",
        ]
        try:
            result = run_command(command, cwd=project_dir, env=env)
        except (CommandNotFoundError, WorkingDirectoryError) as e:
            self.reporter.error(str(e))
            return False

        if not result.succeeded:
            self.reporter.error("Deployment failed!")
            return False
        return True

    def _print_details(
        self, env: Dict[str, str], gateway_name: str, region: Optional[str]
    ) -> None:
        stack_name = f"{gateway_name}{self.settings.get_stack_suffix()}"
        self.reporter.line()
        self.reporter.info("Deployment Details:")
        self.reporter.line(f"  Gateway ID: {env.get('GATEWAY_IDENTIFIER', '')}")
        self.reporter.line(f"  Stack Name: {stack_name}")
        self.reporter.line(f"  Region: {region}")
        self.reporter.line(
            f"  Credential Provider: {env.get('CREDENTIAL_PROVIDER_NAME', '')}"
        )
        self.reporter.line()

    def _print_targets(
        self, aws_client: AWSClientManager, gateway_id: str
    ) -> None:
        self.reporter.info("Fetching target details...")
        try:
            targets = GatewayClient(aws_client).list_targets(gateway_id)
        except (ClientError, BotoCoreError) as e:
            self.reporter.warning(f"Could not list gateway targets: {e}")
            return

        if not targets:
            self.reporter.line("  No targets found")
        for target in targets:
            self.reporter.line(
                f"  - {target.target_id} ({target.name or 'unnamed'}): "
                f"{target.status}"
            )
