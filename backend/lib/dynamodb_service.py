"""
=============================================================================
DYNAMODB SERVICE - record store for usage readings and alert thresholds
=============================================================================

Two tables are involved:

Usage table (TABLE):
- id (String) - Partition Key - the owning user (Cognito sub)
- date (String) - Sort Key - YYYY-MM-DD
- usage (Number) - kWh for that day
- timestamp (String) - when the reading was taken or ingested

Threshold table (THRESHOLD_TABLE):
- id (String) - Partition Key - the owning user
- threshold (Number) - alert threshold in kWh, optional

Writes are plain puts (last write wins per key); nothing here retries.
Every method catches AWS errors, logs them, and returns False/None so the
caller decides whether the failure is fatal.
=============================================================================
"""

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

import math
from decimal import Decimal, DecimalException
from typing import Dict, List, Optional

from backend.lib.config import Settings, get_settings
from backend.lib.energy_core.models import ThresholdSetting
from backend.lib.observability import logger


class DynamoDBService:
    """
    A service class for the usage and threshold tables.

    Usage:
        db = DynamoDBService()
        db.put_usage({"id": "user123", "date": "2023-01-01", "usage": Decimal("12.5")})
        setting = db.get_threshold("user123")
    """

    def __init__(self, settings: Settings = None, dynamodb=None):
        """
        Args:
            settings: table names and region; defaults to the environment.
            dynamodb: an existing boto3 DynamoDB resource. When omitted one
                      is created, pointed at ENDPOINT_OVERRIDE if set.
        """
        settings = settings or get_settings()
        self.usage_table_name = settings.usage_table
        self.threshold_table_name = settings.threshold_table

        if dynamodb is None:
            if settings.endpoint_override:
                dynamodb = boto3.resource('dynamodb', region_name=settings.region,
                                          endpoint_url=settings.endpoint_override)
            else:
                logger.warning("No value for ENDPOINT_OVERRIDE provided for DynamoDB, using default")
                dynamodb = boto3.resource('dynamodb', region_name=settings.region)
        self.dynamodb = dynamodb

        self.usage_table = self.dynamodb.Table(self.usage_table_name)
        self.threshold_table = self.dynamodb.Table(self.threshold_table_name)

    def put_usage(self, item: Dict) -> bool:
        """
        Store one usage record, overwriting any record with the same id and date.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            self.usage_table.put_item(Item=item)
            return True

        except (ClientError, BotoCoreError, DecimalException) as e:
            logger.error(f"Failed to put usage record: {e}")
            return False

    def get_threshold(self, user_id: str) -> Optional[ThresholdSetting]:
        """
        Read a user's alert threshold.

        Returns:
            ThresholdSetting, or None when the user has no record, the
            read failed, or the stored threshold is not a finite number.
            A record without a threshold attribute comes back with
            threshold=None.
        """
        try:
            response = self.threshold_table.get_item(
                Key={'id': user_id},
                ProjectionExpression='threshold'
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to read threshold: {e}")
            return None

        item = response.get('Item')
        if item is None:
            return None
        threshold = item.get('threshold')
        if threshold is None:
            return ThresholdSetting(user_id=user_id)

        try:
            value = float(threshold)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value):
            logger.error(f"Stored threshold for {user_id} is not a number: {threshold!r}")
            return None
        return ThresholdSetting(user_id=user_id, threshold=value)

    def update_threshold(self, user_id: str, threshold: float) -> Optional[Dict]:
        """
        Set a user's threshold, creating the record if it doesn't exist.

        Returns:
            dict: the updated attributes, or None if the update failed
        """
        try:
            response = self.threshold_table.update_item(
                Key={'id': user_id},
                UpdateExpression='SET threshold = :t',
                ExpressionAttributeValues={':t': Decimal(str(threshold))},
                ReturnValues='UPDATED_NEW'
            )
            return response.get('Attributes', {})

        except (ClientError, BotoCoreError, DecimalException) as e:
            logger.error(f"Failed to update threshold: {e}")
            return None

    def query_usage(self, user_id: str, start_date: str, end_date: str) -> Optional[List[Dict]]:
        """
        Get a user's usage records with start_date <= date <= end_date.

        Follows LastEvaluatedKey until every page has been read.

        Returns:
            list: usage records sorted by date, or None if the query failed
        """
        condition = Key('id').eq(user_id) & Key('date').between(start_date, end_date)
        try:
            response = self.usage_table.query(KeyConditionExpression=condition)
            items = response.get('Items', [])

            while 'LastEvaluatedKey' in response:
                response = self.usage_table.query(
                    KeyConditionExpression=condition,
                    ExclusiveStartKey=response['LastEvaluatedKey']
                )
                items.extend(response.get('Items', []))

            return items

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to query usage: {e}")
            return None

    def scan_usage(self) -> Optional[List[Dict]]:
        """
        Read every record in the usage table. For development and testing only.

        Returns:
            list: all usage records, or None if the scan failed
        """
        try:
            response = self.usage_table.scan()
            items = response.get('Items', [])

            while 'LastEvaluatedKey' in response:
                response = self.usage_table.scan(ExclusiveStartKey=response['LastEvaluatedKey'])
                items.extend(response.get('Items', []))

            return items

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to scan usage table: {e}")
            return None
