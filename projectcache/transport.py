"""Streaming downloads over HTTP"""

import logging
import os
from pathlib import Path
from types import TracebackType

import httpx

from projectcache.config import get_settings
from projectcache.errors import AuthorizationError, NetworkError, NotFoundError

logger = logging.getLogger("projectcache.transport")


class HttpTransport:
    """
    Downloads (signed) URLs to local files.
    If no client is given, the transport creates one and closes it when used as an async context manager.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        chunk_size: int | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.chunk_size = chunk_size or settings.download_chunk_size
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout or settings.download_timeout)

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def download_to(self, url: str, path: Path):
        """
        Stream the body of url into path.
        The body is written to a .part file next to path first, so path is either the old file or the complete new one.
        """
        path = Path(path)
        part = path.with_name(path.name + ".part")
        try:
            async with self.client.stream("GET", url) as r:
                _raise_for_status(r)
                with part.open("wb") as f:
                    async for chunk in r.aiter_bytes(chunk_size=self.chunk_size):
                        f.write(chunk)
            os.replace(part, path)
        except httpx.HTTPError as e:
            part.unlink(missing_ok=True)
            detail = f"HTTP {e.response.status_code}" if isinstance(e, httpx.HTTPStatusError) else type(e).__name__
            raise NetworkError(f"Download of {_strip_query(url)} failed: {detail}") from e
        except BaseException:
            part.unlink(missing_ok=True)
            raise
        logger.debug(f"Downloaded {_strip_query(url)} to {path}")


def _raise_for_status(r: httpx.Response):
    if r.status_code == 404:
        raise NotFoundError(f"{_strip_query(str(r.url))} not found")
    if r.status_code in (401, 403):
        raise AuthorizationError(f"Access to {_strip_query(str(r.url))} denied (HTTP {r.status_code})")
    r.raise_for_status()


def _strip_query(url: str) -> str:
    # signed urls carry credentials in the query string, keep those out of logs and errors
    return url.split("?", 1)[0]
