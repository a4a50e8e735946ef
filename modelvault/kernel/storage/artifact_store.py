"""
Artifact storage.

Every model has up to two artifact files: the primary one and a
platform-specific variant. A file's path depends only on the model id and
the variant, never on who owns the model, so co-owners share the same
bytes without copies.

Layout:

    <project_dir>/<models_dir>/<model_id>.<extension>
"""

import os
import uuid
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from modelvault.config import Settings, get_settings
from modelvault.errors import ArtifactNotFoundError, StorageError
from modelvault.logging_config import get_logger

logger = get_logger(__name__)


class ArtifactVariant(str, Enum):
    """Kinds of artifact a model can carry."""

    PRIMARY = "primary"
    PLATFORM_VARIANT = "platform_variant"


@dataclass(frozen=True)
class StorageConfig:
    """Where artifacts live and how their files are named."""

    project_dir: Path
    models_dir_name: str = "models"
    primary_extension: str = "smdl"
    variant_extension: str = "ismdl"

    @property
    def models_dir(self) -> Path:
        return self.project_dir / self.models_dir_name

    def extension_for(self, variant: ArtifactVariant) -> str:
        if variant == ArtifactVariant.PRIMARY:
            return self.primary_extension
        return self.variant_extension

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageConfig":
        return cls(
            project_dir=Path(settings.project_dir),
            models_dir_name=settings.models_dir,
            primary_extension=settings.model_file_extension,
            variant_extension=settings.model_variant_file_extension,
        )


class LocalFileSystem:
    """
    Thin wrapper over pathlib.

    `delete_file` raises FileNotFoundError for a missing file and lets every
    other OSError through unchanged, so callers can tell the two apart.
    """

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def write_file(self, path: Path, data: bytes) -> None:
        # Write next to the target then swap, readers never see half a file
        tmp_path = path.with_name(f".{path.name}.part")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)

    def delete_file(self, path: Path) -> None:
        path.unlink()

    def ensure_dir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)


class ArtifactStore:
    """
    Create, overwrite, probe and delete model artifacts.

    Usage:
        store = ArtifactStore(StorageConfig(project_dir=Path("project")))
        store.write(model.id, ArtifactVariant.PRIMARY, data)
        store.exists(model.id, ArtifactVariant.PRIMARY)  # True
    """

    def __init__(self, config: StorageConfig, fs: Optional[LocalFileSystem] = None):
        self.config = config
        self.fs = fs or LocalFileSystem()

    def ensure_layout(self) -> None:
        """Create the project and models directories if they are missing."""
        try:
            self.fs.ensure_dir(self.config.project_dir)
            self.fs.ensure_dir(self.config.models_dir)
        except OSError as e:
            raise StorageError() from e

    def resolve_path(self, model_id: uuid.UUID, variant: ArtifactVariant) -> Path:
        """Deterministic path of an artifact. Pure."""
        extension = self.config.extension_for(variant)
        return self.config.models_dir / f"{model_id}.{extension}"

    def exists(self, model_id: uuid.UUID, variant: ArtifactVariant) -> bool:
        return self.fs.exists(self.resolve_path(model_id, variant))

    def write(self, model_id: uuid.UUID, variant: ArtifactVariant, data: bytes) -> Path:
        """
        Store artifact bytes, replacing whatever was there.

        First uploads and overwrites behave identically.
        """
        path = self.resolve_path(model_id, variant)
        try:
            self.fs.ensure_dir(path.parent)
            self.fs.write_file(path, data)
        except OSError as e:
            logger.error("Writing %s artifact of model %s failed: %s", variant.value, model_id, e)
            raise StorageError() from e
        return path

    def open(self, model_id: uuid.UUID, variant: ArtifactVariant) -> Path:
        """Path of an existing artifact, ready to be streamed."""
        path = self.resolve_path(model_id, variant)
        if not self.fs.exists(path):
            raise ArtifactNotFoundError()
        return path

    def delete(self, model_id: uuid.UUID, variant: ArtifactVariant) -> None:
        """
        Delete a single artifact.

        Raises:
            ArtifactNotFoundError: the artifact is not on disk
            StorageError: the filesystem refused the deletion
        """
        path = self.resolve_path(model_id, variant)
        try:
            self.fs.delete_file(path)
        except FileNotFoundError as e:
            raise ArtifactNotFoundError("Model file does not exist...") from e
        except OSError as e:
            raise StorageError() from e

    def cascade_delete(self, model_id: uuid.UUID) -> List[ArtifactVariant]:
        """
        Reclaim both artifacts of a model whose last owner was removed.

        Missing files are skipped. Returns the variants actually deleted.
        """
        removed = self._delete_all(model_id)
        logger.info(
            "Reclaimed artifacts of orphaned model %s",
            model_id,
            extra={"model_id": str(model_id), "variants": [v.value for v in removed]},
        )
        return removed

    def explicit_delete(self, model_id: uuid.UUID) -> List[ArtifactVariant]:
        """
        Remove both artifacts of a model deleted on request.

        Missing files are skipped. Returns the variants actually deleted.
        """
        removed = self._delete_all(model_id)
        logger.info(
            "Deleted artifacts of model %s on request",
            model_id,
            extra={"model_id": str(model_id), "variants": [v.value for v in removed]},
        )
        return removed

    def _delete_all(self, model_id: uuid.UUID) -> List[ArtifactVariant]:
        removed = []
        for variant in ArtifactVariant:
            try:
                self.delete(model_id, variant)
            except ArtifactNotFoundError:
                continue
            removed.append(variant)
        return removed


@lru_cache
def get_artifact_store() -> ArtifactStore:
    """Artifact store built from the application settings."""
    return ArtifactStore(StorageConfig.from_settings(get_settings()))
