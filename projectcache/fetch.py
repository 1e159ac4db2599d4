"""
Bring the local cache of a project up to date with object storage.

The steps in ensure_local are strictly ordered, except that metadata and thumbnail are
downloaded concurrently. The bundle can only be fetched after the metadata is known,
because its object key contains the metadata hash. The marker file is written last.
"""

import asyncio
import logging
import weakref
from pathlib import Path
from typing import Protocol

from projectcache.archive import extract_all
from projectcache.names import LocalName, ObjectKeyConverter
from projectcache.storage import ProjectStorage

logger = logging.getLogger("projectcache.fetch")


class ResourceProvider(Protocol):
    async def create_signed_url(self, key: str) -> str: ...


class Transport(Protocol):
    async def download_to(self, url: str, path: Path) -> None: ...


class Unpacker(Protocol):
    def __call__(self, archive_path: Path, dest_dir: Path, overwrite: bool = True) -> None: ...


# Locks live as long as someone holds or waits for them
_PROJECT_LOCKS: "weakref.WeakValueDictionary[Path, asyncio.Lock]" = weakref.WeakValueDictionary()


def project_lock(storage: ProjectStorage) -> asyncio.Lock:
    """Lock that serialises ensure_local calls for the same cache directory within this process"""
    lock = _PROJECT_LOCKS.get(storage.base_dir)
    if lock is None:
        lock = _PROJECT_LOCKS[storage.base_dir] = asyncio.Lock()
    return lock


async def download_file(
    storage: ProjectStorage,
    key_converter: ObjectKeyConverter,
    name: str,
    resource_provider: ResourceProvider,
    transport: Transport,
) -> Path:
    """
    Download one project asset.
    The same asset has a short name that converts both to the object key and to the local path.
    """
    local_path = storage.local_names.to_full_name(name)
    url = await resource_provider.create_signed_url(key_converter.to_full_name(name))
    logger.debug(f"Downloading {name} for project {storage.project.name}")
    await transport.download_to(url, local_path)
    return local_path


async def ensure_local(
    storage: ProjectStorage,
    resource_provider: ResourceProvider,
    transport: Transport,
    unpack: Unpacker = extract_all,
):
    """
    Make sure the project is completely cached locally.
    On any error the marker is absent afterwards, so the project is reported as not cached
    and calling this again retries every step.
    """
    project = storage.project
    async with project_lock(storage):
        logger.info(f"Caching project {project.name} in {storage.base_dir}")
        try:
            await _ensure_local(storage, resource_provider, transport, unpack)
        except Exception:
            logger.exception(f"Caching project {project.name} failed")
            raise
        logger.info(f"Project {project.name} is cached (hash {storage.metadata.hash})")


async def _ensure_local(
    storage: ProjectStorage, resource_provider: ResourceProvider, transport: Transport, unpack: Unpacker
):
    storage.base_dir.mkdir(parents=True, exist_ok=True)
    # an earlier marker must not survive a refresh that fails halfway
    storage.clear_marker()

    attributes = storage.project.attributes
    await _join(
        download_file(storage, attributes, LocalName.METADATA, resource_provider, transport),
        download_file(storage, attributes, storage.settings.thumbnail_name, resource_provider, transport),
    )
    storage.reset_metadata()

    # The bundle key depends on the hash of the project state, so this needs the metadata
    key_provider = storage.project.key_provider(storage.metadata.hash)
    archive = await download_file(storage, key_provider, LocalName.MODEL_VIEW, resource_provider, transport)

    bundle_dir = storage.versioned_bundle_dir
    logger.debug(f"Unpacking {archive.name} to {bundle_dir}")
    await _unpack(unpack, archive, bundle_dir)

    try:
        archive.unlink()
    except OSError:
        logger.warning(f"Could not remove downloaded archive {archive}", exc_info=True)

    storage.mark_cached()


async def _unpack(unpack: Unpacker, archive: Path, bundle_dir: Path):
    """
    Unpack in a worker thread. A thread cannot be interrupted, so on cancellation we wait
    for it to finish before giving up the project lock; otherwise a later call could commit
    a bundle that this thread then replaces.
    """
    unpacking = asyncio.ensure_future(asyncio.to_thread(unpack, archive, bundle_dir, overwrite=True))
    try:
        await asyncio.shield(unpacking)
    except asyncio.CancelledError:
        logger.info(f"Cancelled while unpacking {archive.name}, waiting for the unpack to finish")
        await asyncio.wait({unpacking})
        if not unpacking.cancelled() and unpacking.exception() is not None:
            logger.warning(f"Unpacking {archive.name} failed after cancellation", exc_info=unpacking.exception())
        raise


async def _join(*coros):
    """Run coroutines concurrently. If one fails, the others are cancelled before the error is raised"""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
