"""
Artifact storage on the local filesystem.
"""

from modelvault.kernel.storage.artifact_store import (
    ArtifactStore,
    ArtifactVariant,
    LocalFileSystem,
    StorageConfig,
    get_artifact_store,
)

__all__ = [
    "ArtifactStore",
    "ArtifactVariant",
    "LocalFileSystem",
    "StorageConfig",
    "get_artifact_store",
]
