"""
Project cache command line interface
"""

import argparse
import asyncio
import inspect
import logging
import sys

from projectcache.config import ENV_PREFIX, get_settings, s3_enabled
from projectcache.connections import cache_connections
from projectcache.errors import ProjectCacheError
from projectcache.fetch import ensure_local
from projectcache.fingerprint import file_hash
from projectcache.models import Project
from projectcache.objectstorage.s3bucket import S3ResourceProvider
from projectcache.storage import ProjectStorage
from projectcache.transport import HttpTransport


async def ensure(args):
    if not s3_enabled():
        logging.error(f"Object storage is not configured, set {ENV_PREFIX.upper()}S3_HOST and the S3 keys")
        sys.exit(1)
    storage = ProjectStorage(Project(name=args.project))
    async with cache_connections():
        async with HttpTransport() as transport:
            await ensure_local(storage, S3ResourceProvider(bucket=args.bucket), transport)
    print(storage.bundle_dir())


def status(args):
    storage = ProjectStorage(Project(name=args.project))
    if not storage.is_cached():
        print(f"{args.project}: not cached")
        sys.exit(1)
    print(f"{args.project}: cached, hash {storage.metadata.hash}")
    print(storage.bundle_dir())


def fingerprint(args):
    for path in args.files:
        print(f"{file_hash(path)}  {path}")


def config(_args):
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={'' if v is None else v}")


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m projectcache")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("ensure", help="Download a project into the local cache (if needed, refresh it)")
    p.add_argument("project", help="Name of the project")
    p.add_argument("-b", "--bucket", help="Bucket to read from (default: from settings)")
    p.set_defaults(func=ensure)

    p = subparsers.add_parser("status", help="Check whether a project is cached locally")
    p.add_argument("project", help="Name of the project")
    p.set_defaults(func=status)

    p = subparsers.add_parser("fingerprint", help="Print the fingerprint (SHA-1, uppercase hex) of files")
    p.add_argument("files", nargs="+", help="Files to hash")
    p.set_defaults(func=fingerprint)

    p = subparsers.add_parser("config", help="Print the current settings")
    p.set_defaults(func=config)

    args = parser.parse_args()

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    for name in ("botocore", "aiobotocore", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    try:
        if inspect.iscoroutinefunction(args.func):
            asyncio.run(args.func(args))
        else:
            args.func(args)
    except ProjectCacheError as e:
        logging.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
