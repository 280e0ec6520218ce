"""Unit tests for AWS Client Manager."""

import pytest
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound

from deploy_tools.core.aws_client import (
    AWSClientError,
    AWSClientManager,
    session_profile,
)


class TestAWSClientManager:
    """Test cases for AWSClientManager class."""

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_session_is_lazy(self, mock_session_class):
        """Test no session is created until a client is needed."""
        AWSClientManager(profile_name="test-profile")

        mock_session_class.assert_not_called()

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_session_with_profile(self, mock_session_class):
        """Test session uses the given profile."""
        manager = AWSClientManager(profile_name="test-profile")
        manager.get_client("iam", "us-east-1")

        mock_session_class.assert_called_once_with(profile_name="test-profile")

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_session_without_profile(self, mock_session_class):
        """Test session uses the default credential chain."""
        manager = AWSClientManager()
        manager.get_client("iam", "us-east-1")

        mock_session_class.assert_called_once_with()

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_profile_not_found(self, mock_session_class):
        """Test unknown profile is reported as AWSClientError."""
        mock_session_class.side_effect = ProfileNotFound(profile="missing")

        manager = AWSClientManager(profile_name="missing")

        with pytest.raises(AWSClientError) as exc_info:
            manager.get_client("iam", "us-east-1")
        assert "missing" in str(exc_info.value)

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_client_caching(self, mock_session_class):
        """Test clients are cached per service and region."""
        mock_session = Mock()
        mock_session.client.side_effect = lambda service, region_name: Mock()
        mock_session_class.return_value = mock_session

        manager = AWSClientManager()
        client1 = manager.get_client("iam", "us-east-1")
        client2 = manager.get_client("iam", "us-east-1")
        client3 = manager.get_client("iam", "us-west-2")

        assert client1 is client2
        assert client1 is not client3
        assert mock_session.client.call_count == 2

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_client_uses_explicit_region(self, mock_session_class):
        """Test explicit region is used when none is passed."""
        mock_session = Mock()
        mock_session_class.return_value = mock_session

        manager = AWSClientManager(region_name="eu-west-1")
        manager.get_client("cloudformation")

        mock_session.client.assert_called_once_with(
            "cloudformation", region_name="eu-west-1"
        )

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_current_region_from_session(self, mock_session_class):
        """Test region falls back to the session region."""
        mock_session = Mock()
        mock_session.region_name = "ap-southeast-2"
        mock_session_class.return_value = mock_session

        assert AWSClientManager().get_current_region() == "ap-southeast-2"

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_current_region_default(self, mock_session_class):
        """Test region defaults to us-west-2."""
        mock_session = Mock()
        mock_session.region_name = None
        mock_session_class.return_value = mock_session

        assert AWSClientManager().get_current_region() == "us-west-2"

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_account_id(self, mock_session_class):
        """Test getting account ID."""
        mock_session = Mock()
        mock_sts_client = Mock()
        mock_sts_client.get_caller_identity.return_value = {
            "Account": "123456789012"
        }
        mock_session.client.return_value = mock_sts_client
        mock_session_class.return_value = mock_session

        manager = AWSClientManager(region_name="us-east-1")

        assert manager.get_account_id() == "123456789012"

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_account_id_no_credentials(self, mock_session_class):
        """Test missing credentials raise AWSClientError."""
        mock_session = Mock()
        mock_sts_client = Mock()
        mock_sts_client.get_caller_identity.side_effect = NoCredentialsError()
        mock_session.client.return_value = mock_sts_client
        mock_session_class.return_value = mock_session

        manager = AWSClientManager(region_name="us-east-1")

        with pytest.raises(AWSClientError) as exc_info:
            manager.get_account_id()
        assert "credentials not found" in str(exc_info.value)

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_get_account_id_client_error(self, mock_session_class):
        """Test STS errors raise AWSClientError."""
        mock_session = Mock()
        mock_sts_client = Mock()
        mock_sts_client.get_caller_identity.side_effect = ClientError(
            {"Error": {"Code": "ExpiredToken", "Message": "Token expired"}},
            "GetCallerIdentity",
        )
        mock_session.client.return_value = mock_sts_client
        mock_session_class.return_value = mock_session

        manager = AWSClientManager(region_name="us-east-1")

        with pytest.raises(AWSClientError) as exc_info:
            manager.get_account_id()
        assert "Token expired" in str(exc_info.value)

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_clear_cache(self, mock_session_class):
        """Test clearing client cache."""
        mock_session = Mock()
        mock_session.client.side_effect = lambda service, region_name: Mock()
        mock_session_class.return_value = mock_session

        manager = AWSClientManager()
        first = manager.get_client("iam", "us-east-1")
        assert len(manager._clients) == 1

        manager.clear_cache()
        assert len(manager._clients) == 0
        assert manager.get_client("iam", "us-east-1") is not first
        assert mock_session_class.call_count == 1


class TestSessionProfile:
    """Test cases for session_profile."""

    def test_default_maps_to_none(self):
        """Test default profile uses the credential chain."""
        assert session_profile("default", {}) is None

    def test_default_kept_when_environment_names_default(self):
        """Test AWS_PROFILE=default still uses the credential chain."""
        assert session_profile("default", {"AWS_PROFILE": "default"}) is None

    def test_default_kept_when_environment_names_other_profile(self):
        """Test explicit default wins over a different AWS_PROFILE."""
        assert session_profile("default", {"AWS_PROFILE": "dev"}) == "default"

    def test_empty_maps_to_none(self):
        """Test missing profile uses the credential chain."""
        assert session_profile(None, {"AWS_PROFILE": "dev"}) is None
        assert session_profile("", {}) is None

    def test_named_profile_kept(self):
        """Test named profile is passed through."""
        assert session_profile("prod", {}) == "prod"

    def test_reads_process_environment(self, monkeypatch):
        """Test os.environ is consulted when no environment is given."""
        monkeypatch.setenv("AWS_PROFILE", "dev")
        assert session_profile("default") == "default"

        monkeypatch.delenv("AWS_PROFILE")
        assert session_profile("default") is None

    @patch("deploy_tools.core.aws_client.boto3.Session")
    def test_explicit_default_reaches_session(self, mock_session_class):
        """Test default profile is not replaced by AWS_PROFILE."""
        manager = AWSClientManager(
            profile_name=session_profile("default", {"AWS_PROFILE": "dev"})
        )
        manager.get_client("sts", "us-west-2")

        mock_session_class.assert_called_once_with(profile_name="default")
