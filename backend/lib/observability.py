# backend/lib/observability.py
"""
Shared structured logger.

Lambda writes stdout to CloudWatch; Powertools turns each call into one
JSON line and, through @logger.inject_lambda_context on the handlers,
adds the request id and cold-start flag to every entry.
"""
from aws_lambda_powertools import Logger

SERVICE_NAME = "energy-monitor"

logger = Logger(service=SERVICE_NAME)
