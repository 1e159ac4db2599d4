"""Local, disk-backed cache of project artifacts stored in S3-compatible object storage."""

__version__ = "0.3.0"
