"""Blob stores: raw resource bytes keyed by content hash."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from tracelens.core.config import default_resources_dir

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Content-addressed byte storage used by SnapshotStorage.resource_content()."""

    @abstractmethod
    def get(self, content_hash: str) -> bytes: ...

    @abstractmethod
    def put(self, content_hash: str, data: bytes) -> None: ...

    @abstractmethod
    def __contains__(self, content_hash: object) -> bool: ...


class InMemoryBlobStore(BlobStore):
    """Dict-backed store for tests and live capture. Missing hashes raise KeyError."""

    def __init__(self, blobs: dict[str, bytes] | None = None) -> None:
        self._blobs: dict[str, bytes] = dict(blobs or {})

    def get(self, content_hash: str) -> bytes:
        return self._blobs[content_hash]

    def put(self, content_hash: str, data: bytes) -> None:
        self._blobs[content_hash] = data

    def __contains__(self, content_hash: object) -> bool:
        return content_hash in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)


class FileBlobStore(BlobStore):
    """
    Directory of blob files, each named exactly by its content hash.

    Directory layout::

        {resources_dir}/
            {content_hash}      # raw response body

    Reads are synchronous; a missing blob raises FileNotFoundError as-is.
    Hashes containing path separators raise ValueError.
    """

    def __init__(self, resources_dir: str | None = None) -> None:
        self._dir = Path(resources_dir or default_resources_dir())

    @property
    def resources_dir(self) -> Path:
        return self._dir

    def _blob_path(self, content_hash: str) -> Path:
        if not _is_blob_name(content_hash):
            raise ValueError(f"invalid content hash {content_hash!r}")
        return self._dir / content_hash

    def get(self, content_hash: str) -> bytes:
        return self._blob_path(content_hash).read_bytes()

    def put(self, content_hash: str, data: bytes) -> None:
        path = self._blob_path(content_hash)
        if path.exists():
            return
        self._dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Stored blob %s (%d bytes)", content_hash, len(data))

    def __contains__(self, content_hash: object) -> bool:
        return _is_blob_name(content_hash) and self._blob_path(content_hash).is_file()


def _is_blob_name(content_hash: object) -> bool:
    """A hash must name a single file directly inside the blob directory."""
    return (
        isinstance(content_hash, str)
        and content_hash not in ("", ".", "..")
        and "/" not in content_hash
        and "\\" not in content_hash
        and "\0" not in content_hash
    )
