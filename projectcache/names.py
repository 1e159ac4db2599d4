"""
Name resolution for project assets.

An asset has a short logical name (e.g. metadata.json) that is converted to a full
local path or to a full object key. Object storage has no real directories, so the
remote keys encode the project (and, for versioned assets, the content hash) in a prefix.
"""

from pathlib import Path, PurePosixPath


class LocalName:
    METADATA = "metadata.json"
    MARKER = "marker"
    #: downloaded bundle archive, removed after it is unpacked
    MODEL_VIEW = "model-view.zip"


class LocalNameConverter:
    """Converts logical names to paths inside a project's local cache directory"""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir).absolute()

    def to_full_name(self, name: str) -> Path:
        relative = PurePosixPath(name)
        if not name or relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Invalid local name: {name!r}")
        return self.base_dir.joinpath(*relative.parts)


class ObjectKeyConverter:
    """Converts logical names to object keys under a fixed prefix"""

    def __init__(self, prefix: str):
        self.prefix = prefix.strip("/")

    def to_full_name(self, name: str) -> str:
        if not name or name.startswith("/"):
            raise ValueError(f"Invalid object name: {name!r}")
        return f"{self.prefix}/{name}"


def project_prefix(project: str) -> str:
    return f"projects/{project}"


def hashed_prefix(project: str, hash: str) -> str:
    return f"cache/{project}/{hash}"
