"""Errors raised while fetching and reading project caches.

Local filesystem failures are not wrapped: they propagate as the builtin ``OSError``.
"""


class ProjectCacheError(Exception):
    pass


class NetworkError(ProjectCacheError):
    """Signed URL issuance or a download failed."""


class AuthorizationError(ProjectCacheError):
    """The object store refused access to an object."""


class NotFoundError(ProjectCacheError, LookupError):
    """A remote object does not exist."""


class DeserializationError(ProjectCacheError, ValueError):
    """A local file is missing or does not match the expected schema."""


class ArchiveFormatError(ProjectCacheError):
    """A bundle archive is corrupt or not a supported (zip) archive."""


class NotCachedError(ProjectCacheError):
    """An operation needs a complete cache entry, but the project is not (fully) cached."""
