"""AWS credentials for signing requests to managed OpenSearch domains."""

import boto3
from botocore.credentials import Credentials
from botocore.exceptions import BotoCoreError, ClientError

from odm.exceptions import ODMError
from odm.logging import get_logger

logger = get_logger(__name__)


class CredentialsError(ODMError):
    """Raised when AWS credentials cannot be obtained."""


def get_aws_credentials(
    *,
    profile: str | None = None,
    assume_role: str | None = None,
    region: str = "us-east-1",
    role_session_name: str = "odm-client",
) -> Credentials:
    """Get AWS credentials, optionally from a profile or by assuming a role.

    Args:
        profile: Optional AWS profile name
        assume_role: Optional IAM role ARN to assume
        region: AWS region (default: us-east-1)
        role_session_name: Name of the role session (default: odm-client)

    Returns:
        Credentials object

    Raises:
        CredentialsError: If role assumption fails or no credentials are configured

    """
    session = boto3.Session(profile_name=profile) if profile else boto3.Session()

    if assume_role:
        logger.info("Assuming role: %s", assume_role)
        sts_client = session.client("sts", region_name=region)

        try:
            response = sts_client.assume_role(
                RoleArn=assume_role,
                RoleSessionName=role_session_name,
            )
        except (BotoCoreError, ClientError) as e:
            raise CredentialsError(f"Failed to assume role {assume_role}: {e!s}") from e

        credentials = response["Credentials"]
        logger.info("Successfully assumed role: %s", assume_role)
        return Credentials(
            access_key=credentials["AccessKeyId"],
            secret_key=credentials["SecretAccessKey"],
            token=credentials["SessionToken"],
        )

    credentials = session.get_credentials()
    if credentials is None:
        raise CredentialsError("No AWS credentials found. Configure AWS credentials, a profile or a role to assume.")
    return credentials
