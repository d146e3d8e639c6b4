"""
=============================================================================
SNS SERVICE - threshold alert notifications
=============================================================================

Alerts are published to one topic (SNS_TOPIC_ARN); subscribers (email,
SMS, ...) are managed on the topic itself, outside this application.

Flow:
-----
[Ingestion pipeline] --> [SNS Topic] --> [Email Subscriber]
                                    --> [SMS Subscriber]

Publishing is fire-and-forget. A failed publish is logged and reported
as False, and never stops the reading from being stored.
=============================================================================
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from backend.lib.config import Settings, get_settings
from backend.lib.observability import logger


class SNSService:
    """
    Publishes alert messages to the configured topic.

    Usage:
        sns = SNSService()
        sns.publish('{"userId": "user123", ...}', "Energy Usage Threshold Exceeded")
    """

    def __init__(self, settings: Settings = None, client=None):
        settings = settings or get_settings()
        self.topic_arn = settings.sns_topic_arn
        self.sns_client = client or boto3.client('sns', region_name=settings.region)

    def publish(self, message: str, subject: str) -> bool:
        """
        Send a message to all topic subscribers.

        Args:
            message: The message body
            subject: Email subject line (max 100 characters)

        Returns:
            bool: True if message was published successfully
        """
        if not self.topic_arn:
            logger.warning("SNS_TOPIC_ARN not configured")
            return False

        try:
            self.sns_client.publish(
                TopicArn=self.topic_arn,
                Subject=subject,
                Message=message
            )
            logger.info("SNS notification sent successfully")
            return True

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send alert: {e}")
            return False
