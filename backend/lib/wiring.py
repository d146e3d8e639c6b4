# backend/lib/wiring.py
"""
Process-wide construction of the AWS-backed services.

A Lambda container reuses its Python process across invocations, so the
factories are cached: clients are created on the first call and handed to
every later invocation. Nothing else holds them globally; handlers get them
as arguments, which is how tests pass fakes instead.
"""
from functools import lru_cache

import httpx

from backend.lib.cognito_service import CognitoService
from backend.lib.config import get_settings
from backend.lib.dynamodb_service import DynamoDBService
from backend.lib.energy_core.batch import CsvBatchDriver
from backend.lib.energy_core.pipeline import UsageIngestionPipeline
from backend.lib.s3_service import S3Service
from backend.lib.sns_service import SNSService
from backend.lib.timestream_service import TimestreamService


@lru_cache
def build_record_store() -> DynamoDBService:
    return DynamoDBService(get_settings())


@lru_cache
def build_blob_store() -> S3Service:
    return S3Service(get_settings())


@lru_cache
def build_identity_provider() -> CognitoService:
    return CognitoService(get_settings())


@lru_cache
def build_http_client() -> httpx.Client:
    return httpx.Client(timeout=30.0, follow_redirects=True)


@lru_cache
def build_pipeline() -> UsageIngestionPipeline:
    settings = get_settings()
    return UsageIngestionPipeline(
        record_store=build_record_store(),
        time_series=TimestreamService(settings),
        notifier=SNSService(settings),
    )


@lru_cache
def build_batch_driver() -> CsvBatchDriver:
    return CsvBatchDriver(blob_store=build_blob_store(), pipeline=build_pipeline())


def reset() -> None:
    """Drop cached services, e.g. after changing environment variables."""
    for factory in (build_record_store, build_blob_store, build_identity_provider,
                    build_http_client, build_pipeline, build_batch_driver, get_settings):
        factory.cache_clear()
