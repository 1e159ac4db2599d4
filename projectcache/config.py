"""
Project cache configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the PROJECTCACHE_ENV_FILE environment variable
"""

import functools
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "projectcache_"


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    local_root: Annotated[
        Path,
        Field(
            description="Root directory for local project caches. Each project gets a subdirectory named after it",
        ),
    ] = Path("cache")

    bundle_dirname: Annotated[
        str,
        Field(
            description="Directory inside a project cache that holds the unpacked model-view bundles, one per hash",
        ),
    ] = "model-view"

    thumbnail_name: Annotated[
        str,
        Field(
            description="File name of the project thumbnail, both locally and in object storage",
        ),
    ] = "thumbnail.png"

    s3_host: Annotated[str | None, Field(description="S3-compatible object storage host")] = None
    s3_access_key: Annotated[str | None, Field(description="S3 access key")] = None
    s3_secret_key: Annotated[str | None, Field(description="S3 secret key")] = None
    s3_bucket: Annotated[str, Field(description="Bucket that holds the project objects")] = "projects"

    signed_url_minutes_valid: Annotated[
        int,
        Field(
            description="Lifetime of signed download URLs. They are consumed right away, so keep this short",
            gt=0,
        ),
    ] = 15

    download_chunk_size: Annotated[int, Field(description="Chunk size (bytes) for streaming downloads", gt=0)] = 64 * 1024
    download_timeout: Annotated[float, Field(description="Timeout (seconds) for a single download request", gt=0)] = 60.0

    @field_validator("bundle_dirname", "thumbnail_name")
    @classmethod
    def single_path_component(cls, value: str) -> str:
        if not value or value in (".", "..") or "/" in value or "\\" in value:
            raise ValueError(f"{value!r} must be a single file or directory name")
        return value

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    # Read once to find the env file, then again so the values from that file are picked up
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


def s3_enabled() -> bool:
    settings = get_settings()
    return all([settings.s3_host, settings.s3_access_key, settings.s3_secret_key])


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
