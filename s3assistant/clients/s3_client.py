"""
S3 Client - boto3 access to the S3-compatible object store

Provides the storage backend used by the storage tools. Every operation takes
the normalized parameter dict produced by ParameterMapper and returns the raw
boto3 response (including ResponseMetadata). botocore errors propagate; the
tools turn them into result payloads.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


def botocore_config(settings: Settings) -> Config:
    # Conservative timeouts; adaptive retries.
    return Config(
        retries={"max_attempts": 5, "mode": "adaptive"},
        connect_timeout=5,
        read_timeout=60,
        s3={"addressing_style": "path" if settings.s3_force_path_style else "auto"},
    )


def create_s3_client(settings: Optional[Settings] = None):
    """Build a boto3 S3 client from settings"""
    settings = settings or get_settings()

    kwargs: Dict[str, Any] = {
        "region_name": settings.aws_region,
        "config": botocore_config(settings),
        "verify": settings.s3_verify_ssl,
    }
    if settings.s3_endpoint:
        kwargs["endpoint_url"] = settings.s3_endpoint
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    logger.info(
        f"S3 client: endpoint={settings.s3_endpoint or 'aws'} "
        f"region={settings.aws_region} verify_ssl={settings.s3_verify_ssl}"
    )
    return boto3.client("s3", **kwargs)


@lru_cache(maxsize=1)
def get_s3_client():
    return create_s3_client()


def describe_client_error(exc: BaseException) -> Tuple[str, str, Optional[int]]:
    """
    Extract (error_code, error_message, http_status) from an exception.

    Works for botocore ClientError and falls back to the exception class name
    for anything else.
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return (
            str(error.get("Code") or exc.__class__.__name__),
            str(error.get("Message") or exc),
            status,
        )
    return exc.__class__.__name__, str(exc), None


class StorageClient:
    """
    Thin wrapper over the boto3 S3 client.

    Tools depend on this class rather than on boto3 directly so tests can
    swap in a fake.
    """

    def __init__(self, client=None):
        self._client = client
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def create_bucket(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info(f"CreateBucket: {params.get('Bucket')}")
        return self.client.create_bucket(**params)

    def delete_bucket(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info(f"DeleteBucket: {params.get('Bucket')}")
        return self.client.delete_bucket(**params)

    def list_buckets(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info("ListBuckets")
        return self.client.list_buckets(**params)

    def put_object(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info(f"PutObject: {params.get('Bucket')}/{params.get('Key')}")
        return self.client.put_object(**params)

    def get_object(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info(f"GetObject: {params.get('Bucket')}/{params.get('Key')}")
        return self.client.get_object(**params)

    def delete_object(self, params: Dict[str, Any]) -> Dict[str, Any]:
        self.logger.info(f"DeleteObject: {params.get('Bucket')}/{params.get('Key')}")
        return self.client.delete_object(**params)
