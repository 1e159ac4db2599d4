from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from projectcache.names import LocalNameConverter, ObjectKeyConverter, hashed_prefix, project_prefix

ProjectName = Annotated[str, Field(pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$", title="Project name")]

# The hash is used as a directory name, so it must be a safe single path component
ContentHash = Annotated[str, Field(pattern=r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$", title="Content hash")]


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: ProjectName

    def local_names(self, root: Path) -> LocalNameConverter:
        """Converter for files in the local cache directory of this project"""
        return LocalNameConverter(Path(root) / self.name)

    @property
    def attributes(self) -> ObjectKeyConverter:
        """Object keys for the current project assets (metadata, thumbnail)"""
        return ObjectKeyConverter(project_prefix(self.name))

    def key_provider(self, hash: str) -> ObjectKeyConverter:
        """Object keys for assets generated for a specific project state"""
        return ObjectKeyConverter(hashed_prefix(self.name, hash))


class ProjectMetadata(BaseModel):
    """Metadata stored next to a project. Only the Hash is needed here, other keys are kept as-is."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    hash: Annotated[ContentHash, Field(alias="Hash")]
