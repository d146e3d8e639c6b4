# backend/lib/config.py
"""
Runtime settings for the handlers and the local Flask server.

Values come from environment variables. Lambda sets them from the
deployment template; locally, backend/app.py calls load_dotenv() first so
a .env file works the same way.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


@dataclass(frozen=True)
class Settings:
    region: str = 'us-east-1'
    usage_table: str = 'EnergyUsage'
    threshold_table: str = 'UserThresholds'
    # DynamoDB endpoint for local testing (e.g. DynamoDB Local)
    endpoint_override: Optional[str] = None
    timestream_database: str = 'EnergyMonitor'
    timestream_table: str = 'EnergyUsage'
    sns_topic_arn: Optional[str] = None
    csv_bucket: str = 'energy-csv-uploads'
    user_pool_client_id: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            region=os.getenv('AWS_REGION', cls.region),
            usage_table=os.getenv('TABLE', cls.usage_table),
            threshold_table=os.getenv('THRESHOLD_TABLE', cls.threshold_table),
            endpoint_override=os.getenv('ENDPOINT_OVERRIDE') or None,
            timestream_database=os.getenv('TIMESTREAM_DATABASE_NAME', cls.timestream_database),
            timestream_table=os.getenv('TIMESTREAM_TABLE_NAME', cls.timestream_table),
            sns_topic_arn=os.getenv('SNS_TOPIC_ARN') or None,
            csv_bucket=os.getenv('CSV_BUCKET', cls.csv_bucket),
            user_pool_client_id=os.getenv('USER_POOL_CLIENT_ID') or None,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
