"""
Signed access to project objects in S3-compatible object storage (e.g., AWS S3, MinIO, SeaweedFS).
"""

import logging

import async_lru
from botocore.exceptions import ClientError
from types_aiobotocore_s3.type_defs import HeadObjectOutputTypeDef

from projectcache.config import get_settings
from projectcache.connections import s3
from projectcache.errors import AuthorizationError, NetworkError, NotFoundError, ProjectCacheError

logger = logging.getLogger("projectcache.objectstorage")

NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}
FORBIDDEN_CODES = {"401", "403", "AccessDenied", "Forbidden", "InvalidAccessKeyId", "SignatureDoesNotMatch"}


def _translate_client_error(e: ClientError, what: str) -> ProjectCacheError:
    code = str(e.response.get("Error", {}).get("Code", ""))
    if code in NOT_FOUND_CODES:
        return NotFoundError(f"{what} not found in object storage")
    if code in FORBIDDEN_CODES:
        return AuthorizationError(f"Access to {what} denied ({code})")
    return NetworkError(f"Object storage error for {what}: {e}")


@async_lru.alru_cache(maxsize=1000)
async def check_bucket(bucket: str) -> str:
    try:
        await s3().head_bucket(Bucket=bucket)
    except ClientError as e:
        raise _translate_client_error(e, f"Bucket {bucket}") from e
    return bucket


async def stat_s3_object(bucket: str, key: str) -> HeadObjectOutputTypeDef:
    try:
        return await s3().head_object(Bucket=bucket, Key=key)
    except ClientError as e:
        raise _translate_client_error(e, f"Object {key}") from e


async def presigned_get(bucket: str, key: str, minutes_valid: int = 15, **kwargs) -> str:
    params = {"Bucket": bucket, "Key": key, **kwargs}
    params = {k: v for k, v in params.items() if v is not None}

    return await s3().generate_presigned_url("get_object", Params=params, ExpiresIn=minutes_valid * 60)


class S3ResourceProvider:
    """Issues signed download URLs for objects in one bucket"""

    def __init__(self, bucket: str | None = None, minutes_valid: int | None = None):
        settings = get_settings()
        self.bucket = bucket or settings.s3_bucket
        self.minutes_valid = minutes_valid or settings.signed_url_minutes_valid

    async def create_signed_url(self, key: str) -> str:
        # Signing happens locally and succeeds for any key, so check that the object is there
        await check_bucket(self.bucket)
        await stat_s3_object(self.bucket, key)
        logger.debug(f"Signing {self.bucket}/{key} for {self.minutes_valid} minutes")
        return await presigned_get(self.bucket, key, minutes_valid=self.minutes_valid)
