"""
=============================================================================
TIMESTREAM SERVICE - time-series store for energy usage
=============================================================================

Each reading becomes one Timestream record:

    Dimensions:  id = <user id>, date = <YYYY-MM-DD>
    MeasureName: energy_usage
    MeasureValue: the usage as a decimal string, type DOUBLE
    Time: processing instant in epoch milliseconds

Timestream only appends, so submitting the same reading twice stores two
points.
=============================================================================
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from backend.lib.config import Settings, get_settings
from backend.lib.observability import logger

MEASURE_NAME = 'energy_usage'


class TimestreamService:
    """
    Writes usage points to a Timestream table.

    Usage:
        ts = TimestreamService()
        ts.write_usage("user123", "2023-01-01", 12.5, 1672574400000)
    """

    def __init__(self, settings: Settings = None, client=None):
        settings = settings or get_settings()
        self.database_name = settings.timestream_database
        self.table_name = settings.timestream_table
        self.client = client or boto3.client('timestream-write', region_name=settings.region)

    @staticmethod
    def build_record(user_id: str, date: str, usage: float, time_ms: int) -> dict:
        return {
            'Dimensions': [
                {'Name': 'id', 'Value': user_id},
                {'Name': 'date', 'Value': date},
            ],
            'MeasureName': MEASURE_NAME,
            'MeasureValue': str(usage),
            'MeasureValueType': 'DOUBLE',
            'Time': str(time_ms),
            'TimeUnit': 'MILLISECONDS',
        }

    def write_usage(self, user_id: str, date: str, usage: float, time_ms: int) -> bool:
        """
        Append one usage point.

        Returns:
            bool: True if Timestream accepted the record
        """
        try:
            self.client.write_records(
                DatabaseName=self.database_name,
                TableName=self.table_name,
                Records=[self.build_record(user_id, date, usage, time_ms)]
            )
            return True

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error adding energy usage data to Timestream: {e}")
            return False
