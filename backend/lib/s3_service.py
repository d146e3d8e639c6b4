"""
=============================================================================
S3 SERVICE - blob store for uploaded CSV files
=============================================================================

Uploaded usage files live in the CSV bucket (CSV_BUCKET). The upload
handler writes them as:

    <userId>-usage-<epoch millis>.csv

and the bucket's put notification triggers process_csv, which reads the
file back and derives the owning user from that name.
=============================================================================
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from typing import Optional

from backend.lib.config import Settings, get_settings
from backend.lib.observability import logger


class S3Service:
    """
    Reads and writes objects by bucket and key.

    Usage:
        s3 = S3Service()
        s3.put_object("energy-csv-uploads", "user123-usage-1.csv", b"date,usage\n...")
        text = s3.get_text("energy-csv-uploads", "user123-usage-1.csv")
    """

    def __init__(self, settings: Settings = None, client=None):
        settings = settings or get_settings()
        self.s3_client = client or boto3.client('s3', region_name=settings.region)

    def download_file(self, bucket: str, key: str) -> Optional[bytes]:
        """
        Download an object's full content.

        Returns:
            bytes: The file content, or None if failed (access denied, not found, ...)
        """
        try:
            response = self.s3_client.get_object(Bucket=bucket, Key=key)
            return response['Body'].read()

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to download s3://{bucket}/{key}: {e}")
            return None

    def get_text(self, bucket: str, key: str, encoding: str = 'utf-8') -> Optional[str]:
        content = self.download_file(bucket, key)
        if content is None:
            return None
        try:
            return content.decode(encoding)
        except UnicodeDecodeError as e:
            logger.error(f"s3://{bucket}/{key} is not {encoding} text: {e}")
            return None

    def put_object(self, bucket: str, key: str, body: bytes, content_type: str = 'text/csv') -> bool:
        """
        Upload content under the given key.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body,
                ContentType=content_type
            )
            return True

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload to S3: {e}")
            return False
