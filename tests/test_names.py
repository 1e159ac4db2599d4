from pathlib import Path

import pytest
from pydantic import ValidationError

from projectcache.models import Project, ProjectMetadata
from projectcache.names import LocalName, LocalNameConverter, ObjectKeyConverter


def test_local_names(tmp_path):
    names = Project(name="P1").local_names(tmp_path)
    assert names.base_dir == tmp_path / "P1"
    assert names.to_full_name(LocalName.METADATA) == tmp_path / "P1" / "metadata.json"
    assert names.to_full_name(LocalName.MARKER) == tmp_path / "P1" / "marker"
    assert names.to_full_name("model-view/H1") == tmp_path / "P1" / "model-view" / "H1"


def test_local_names_are_absolute():
    names = LocalNameConverter(Path("relative/root"))
    assert names.base_dir.is_absolute()
    assert names.to_full_name("x").is_absolute()


@pytest.mark.parametrize("name", ["", "/etc/passwd", "../other", "a/../../b"])
def test_invalid_local_names(tmp_path, name):
    with pytest.raises(ValueError):
        LocalNameConverter(tmp_path).to_full_name(name)


def test_remote_names():
    project = Project(name="P1")
    assert project.attributes.to_full_name("metadata.json") == "projects/P1/metadata.json"
    assert project.attributes.to_full_name("thumbnail.png") == "projects/P1/thumbnail.png"
    assert project.key_provider("ABC").to_full_name("model-view.zip") == "cache/P1/ABC/model-view.zip"
    assert ObjectKeyConverter("/x/y/").to_full_name("z") == "x/y/z"


def test_invalid_remote_names():
    with pytest.raises(ValueError):
        ObjectKeyConverter("x").to_full_name("")


@pytest.mark.parametrize("name", ["", "..", "a/b", "-x", "with space"])
def test_invalid_project_names(name):
    with pytest.raises(ValidationError):
        Project(name=name)


def test_project_is_immutable():
    project = Project(name="P1")
    with pytest.raises(ValidationError):
        project.name = "P2"


def test_metadata_alias():
    assert ProjectMetadata(Hash="H1").hash == "H1"
    assert ProjectMetadata(hash="H1").hash == "H1"
    assert ProjectMetadata(Hash="H1").model_dump(by_alias=True) == {"Hash": "H1"}
    with pytest.raises(ValidationError):
        ProjectMetadata(Hash="..")
