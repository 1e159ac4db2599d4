"""
The object storage client.

There is one S3 client per process. It only exists inside cache_connections(), use it
once around everything that fetches projects (a CLI command, a test fixture, ...).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from aiobotocore.client import AioBaseClient
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from types_aiobotocore_s3.client import S3Client

from projectcache.config import Settings, get_settings, s3_enabled

logger = logging.getLogger("projectcache.connections")


class S3Holder:
    client: S3Client | None = None


S3 = S3Holder()


def s3() -> S3Client:
    if S3.client is None:
        raise ConnectionError("S3 client not started")
    return S3.client


def create_s3_client(settings: Settings) -> AioBaseClient:
    """Create an (unentered) client for the configured object storage"""
    return get_session().create_client(
        service_name="s3",
        endpoint_url=settings.s3_host,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=AioConfig(signature_version="s3v4"),
    )


@asynccontextmanager
async def cache_connections() -> AsyncGenerator[None, None]:
    if not s3_enabled():
        logger.debug("S3 is not configured, not starting an S3 client")
        yield
        return

    settings = get_settings()
    logger.debug(f"Connecting with object storage at {settings.s3_host}")
    async with create_s3_client(settings) as client:
        S3.client = client
        try:
            yield
        finally:
            S3.client = None
