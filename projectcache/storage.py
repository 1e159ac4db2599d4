"""
Local cache storage for a project.

Layout of a project cache entry (under settings.local_root):

    <project>/
      metadata.json
      thumbnail.png
      marker                 written last, only when everything else is in place
      model-view/<hash>/     unpacked bundle, one directory per metadata hash

The marker is the only signal that an entry is complete. Without it, whatever else is
in the directory must not be used.
"""

import logging
import os
import threading
from pathlib import Path

from projectcache.codec import deserialize_file
from projectcache.config import Settings, get_settings
from projectcache.errors import NotCachedError
from projectcache.models import Project, ProjectMetadata
from projectcache.names import LocalName

logger = logging.getLogger("projectcache.storage")

MARKER_CONTENT = "done"


class ProjectStorage:
    def __init__(self, project: Project, settings: Settings | None = None):
        self.project = project
        self.settings = settings or get_settings()
        self.local_names = project.local_names(self.settings.local_root)

        self._metadata: ProjectMetadata | None = None
        self._metadata_lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self.local_names.base_dir

    @property
    def marker_file(self) -> Path:
        return self.local_names.to_full_name(LocalName.MARKER)

    @property
    def metadata_file(self) -> Path:
        return self.local_names.to_full_name(LocalName.METADATA)

    @property
    def metadata(self) -> ProjectMetadata:
        """
        Project metadata, read from the local metadata file on first access and kept in memory.
        Raises DeserializationError if the file is missing or invalid.
        """
        with self._metadata_lock:
            if self._metadata is None:
                self._metadata = deserialize_file(self.metadata_file, ProjectMetadata)
            return self._metadata

    def reset_metadata(self):
        """Forget the in-memory metadata, so the next access reads the file again"""
        with self._metadata_lock:
            self._metadata = None

    @property
    def versioned_bundle_dir(self) -> Path:
        """Directory of the unpacked bundle for the current metadata hash"""
        return self.local_names.to_full_name(self.settings.bundle_dirname) / self.metadata.hash

    def is_cached(self) -> bool:
        return self.marker_file.is_file()

    def verify_cached_state(self):
        """Raise NotCachedError if the project is not completely cached locally"""
        if not self.is_cached():
            raise NotCachedError(f"Project '{self.project.name}' is not cached.")

    def mark_cached(self):
        """Write the marker file. The marker is written under a temporary name and renamed into place"""
        tmp = self.marker_file.with_name(f".{LocalName.MARKER}.tmp")
        tmp.write_text(MARKER_CONTENT, encoding="utf-8")
        os.replace(tmp, self.marker_file)
        logger.debug(f"Marked project {self.project.name} as cached")

    def clear_marker(self):
        self.marker_file.unlink(missing_ok=True)

    def bundle_dir(self) -> Path:
        self.verify_cached_state()
        return self.versioned_bundle_dir

    def thumbnail_file(self) -> Path:
        self.verify_cached_state()
        return self.local_names.to_full_name(self.settings.thumbnail_name)

    def bundle_files(self) -> list[Path]:
        """All files of the cached bundle, relative to the bundle directory"""
        root = self.bundle_dir()
        return sorted(p.relative_to(root) for p in root.rglob("*") if p.is_file())
