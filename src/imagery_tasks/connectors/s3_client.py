"""boto3 S3 client for listing imagery and storing copy actions."""

import os
from typing import Any

import boto3
from dagster import ConfigurableResource, get_dagster_logger

from imagery_tasks.connectors.settings import SettingsResource

logger = get_dagster_logger(__name__)


class S3Resource(ConfigurableResource[Any]):
    """S3 resource configured from :class:`SettingsResource`.

    Works against AWS or a MinIO endpoint; MinIO root credentials are used
    when no AWS keys are set.
    """

    settings: SettingsResource

    def create_client(self) -> Any:
        """Create an S3 client.

        :returns: boto3 S3 client
        """
        endpoint = self.settings.resolve_value("aws_s3_endpoint")
        region = self.settings.resolve_value("aws_region")
        logger.debug(f"Creating S3 client endpoint={endpoint or 'aws'} region={region}")

        return boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID") or os.environ.get("MINIO_ROOT_USER"),
            aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY") or os.environ.get("MINIO_ROOT_PASSWORD"),
            region_name=region,
            use_ssl=self.settings.aws_s3_use_ssl,
        )

    def get_client(self) -> Any:
        """Get an S3 client.

        :returns: boto3 S3 client
        """
        return self.create_client()
