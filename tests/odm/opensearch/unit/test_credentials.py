"""Unit tests for get_aws_credentials."""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from botocore.credentials import Credentials
from botocore.exceptions import ClientError

from odm.opensearch.credentials import CredentialsError, get_aws_credentials


@pytest.mark.unit
class TestGetAwsCredentials:
    """Tests for get_aws_credentials."""

    @pytest.fixture
    def mock_session(self) -> Iterator[MagicMock]:
        """Patch the boto3 Session class used to resolve credentials."""
        with patch("odm.opensearch.credentials.boto3.Session") as mock_class:
            yield mock_class

    def test_default_session_credentials(self, mock_session: MagicMock) -> None:
        """Test that the default credential chain is used without a profile or role."""
        expected = MagicMock()
        mock_session.return_value.get_credentials.return_value = expected

        credentials = get_aws_credentials()

        assert credentials is expected
        mock_session.assert_called_once_with()

    def test_profile_credentials(self, mock_session: MagicMock) -> None:
        """Test that a profile name selects the session's profile."""
        get_aws_credentials(profile="analytics")

        mock_session.assert_called_once_with(profile_name="analytics")

    def test_assume_role(self, mock_session: MagicMock) -> None:
        """Test that assuming a role returns the temporary STS credentials."""
        sts_client = mock_session.return_value.client.return_value
        sts_client.assume_role.return_value = {
            "Credentials": {"AccessKeyId": "AKIA", "SecretAccessKey": "secret", "SessionToken": "token"}
        }

        credentials = get_aws_credentials(assume_role="arn:aws:iam::123456789012:role/search", region="eu-west-1")

        assert isinstance(credentials, Credentials)
        assert (credentials.access_key, credentials.secret_key, credentials.token) == ("AKIA", "secret", "token")
        mock_session.return_value.client.assert_called_once_with("sts", region_name="eu-west-1")
        sts_client.assume_role.assert_called_once_with(
            RoleArn="arn:aws:iam::123456789012:role/search", RoleSessionName="odm-client"
        )
        mock_session.return_value.get_credentials.assert_not_called()

    def test_assume_role_failure(self, mock_session: MagicMock) -> None:
        """Test that an STS error is raised as CredentialsError."""
        sts_client = mock_session.return_value.client.return_value
        sts_client.assume_role.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "not authorized"}}, "AssumeRole"
        )

        with pytest.raises(CredentialsError, match="Failed to assume role arn:aws:iam::123456789012:role/search"):
            get_aws_credentials(assume_role="arn:aws:iam::123456789012:role/search")

    def test_no_credentials(self, mock_session: MagicMock) -> None:
        """Test that a missing credential chain raises CredentialsError."""
        mock_session.return_value.get_credentials.return_value = None

        with pytest.raises(CredentialsError, match="No AWS credentials found"):
            get_aws_credentials()
