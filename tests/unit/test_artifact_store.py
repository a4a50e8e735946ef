"""Unit tests for the artifact store."""

import uuid
from pathlib import Path

import pytest

from modelvault.errors import ArtifactNotFoundError, StorageError
from modelvault.kernel.storage import (
    ArtifactStore,
    ArtifactVariant,
    LocalFileSystem,
    StorageConfig,
)


class BrokenDeleteFileSystem(LocalFileSystem):
    """Deletion fails for a reason other than a missing file."""

    def delete_file(self, path: Path) -> None:
        raise PermissionError(13, "Permission denied", str(path))


@pytest.fixture
def config(tmp_path) -> StorageConfig:
    return StorageConfig(project_dir=tmp_path / "project")


@pytest.fixture
def store(config) -> ArtifactStore:
    artifact_store = ArtifactStore(config)
    artifact_store.ensure_layout()
    return artifact_store


class TestResolvePath:
    def test_layout(self, config):
        store = ArtifactStore(config)
        model_id = uuid.uuid4()

        assert store.resolve_path(model_id, ArtifactVariant.PRIMARY) == (
            config.project_dir / "models" / f"{model_id}.smdl"
        )
        assert store.resolve_path(model_id, ArtifactVariant.PLATFORM_VARIANT) == (
            config.project_dir / "models" / f"{model_id}.ismdl"
        )

    def test_deterministic(self, config):
        model_id = uuid.uuid4()

        first = ArtifactStore(config).resolve_path(model_id, ArtifactVariant.PRIMARY)
        second = ArtifactStore(config).resolve_path(model_id, ArtifactVariant.PRIMARY)

        assert first == second

    def test_custom_extensions(self, tmp_path):
        config = StorageConfig(
            project_dir=tmp_path,
            models_dir_name="blobs",
            primary_extension="bin",
            variant_extension="ibin",
        )
        model_id = uuid.uuid4()

        path = ArtifactStore(config).resolve_path(model_id, ArtifactVariant.PLATFORM_VARIANT)

        assert path == tmp_path / "blobs" / f"{model_id}.ibin"


class TestArtifactStore:
    def test_ensure_layout_creates_directories(self, config):
        ArtifactStore(config).ensure_layout()

        assert config.models_dir.is_dir()

    def test_exists_is_false_for_missing_file(self, store):
        assert store.exists(uuid.uuid4(), ArtifactVariant.PRIMARY) is False

    def test_write_then_open(self, store):
        model_id = uuid.uuid4()
        store.write(model_id, ArtifactVariant.PRIMARY, b"first")

        assert store.exists(model_id, ArtifactVariant.PRIMARY) is True
        assert store.exists(model_id, ArtifactVariant.PLATFORM_VARIANT) is False
        assert store.open(model_id, ArtifactVariant.PRIMARY).read_bytes() == b"first"

    def test_write_overwrites(self, store):
        model_id = uuid.uuid4()
        store.write(model_id, ArtifactVariant.PRIMARY, b"first")
        store.write(model_id, ArtifactVariant.PRIMARY, b"second")

        assert store.open(model_id, ArtifactVariant.PRIMARY).read_bytes() == b"second"

    def test_write_creates_missing_directories(self, config):
        store = ArtifactStore(config)
        model_id = uuid.uuid4()

        store.write(model_id, ArtifactVariant.PLATFORM_VARIANT, b"data")

        assert store.exists(model_id, ArtifactVariant.PLATFORM_VARIANT)

    def test_open_missing_raises(self, store):
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            store.open(uuid.uuid4(), ArtifactVariant.PRIMARY)
        assert exc_info.value.detail == "Model file not found..."

    def test_delete_is_strict(self, store):
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            store.delete(uuid.uuid4(), ArtifactVariant.PRIMARY)
        assert exc_info.value.detail == "Model file does not exist..."

    def test_delete_removes_only_that_variant(self, store):
        model_id = uuid.uuid4()
        store.write(model_id, ArtifactVariant.PRIMARY, b"a")
        store.write(model_id, ArtifactVariant.PLATFORM_VARIANT, b"b")

        store.delete(model_id, ArtifactVariant.PRIMARY)

        assert not store.exists(model_id, ArtifactVariant.PRIMARY)
        assert store.exists(model_id, ArtifactVariant.PLATFORM_VARIANT)

    def test_cascade_delete_tolerates_missing_file(self, store):
        model_id = uuid.uuid4()
        store.write(model_id, ArtifactVariant.PLATFORM_VARIANT, b"b")

        removed = store.cascade_delete(model_id)

        assert removed == [ArtifactVariant.PLATFORM_VARIANT]
        assert not store.exists(model_id, ArtifactVariant.PLATFORM_VARIANT)

    def test_explicit_delete_removes_both(self, store):
        model_id = uuid.uuid4()
        store.write(model_id, ArtifactVariant.PRIMARY, b"a")
        store.write(model_id, ArtifactVariant.PLATFORM_VARIANT, b"b")

        removed = store.explicit_delete(model_id)

        assert removed == [ArtifactVariant.PRIMARY, ArtifactVariant.PLATFORM_VARIANT]

    def test_explicit_delete_of_nothing(self, store):
        assert store.explicit_delete(uuid.uuid4()) == []

    def test_other_os_errors_become_storage_errors(self, config):
        store = ArtifactStore(config, fs=BrokenDeleteFileSystem())
        model_id = uuid.uuid4()
        store.write(model_id, ArtifactVariant.PRIMARY, b"a")

        with pytest.raises(StorageError):
            store.delete(model_id, ArtifactVariant.PRIMARY)
        with pytest.raises(StorageError):
            store.cascade_delete(model_id)
