"""SnapshotStorage — public query and mutation surface over the trace indices."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Callable

from tracelens.core.types import FrameSnapshot, ResourceSnapshot
from tracelens.storage.blob_store import BlobStore, InMemoryBlobStore
from tracelens.storage.channel import SnapshotCallback, SnapshotChannel
from tracelens.storage.frame_history import FrameHistory, FrameSnapshotHistory
from tracelens.storage.renderer import SnapshotRenderer
from tracelens.storage.resource_index import ResourceIndex

if TYPE_CHECKING:
    from tracelens.storage.loader import LoadStats


class SnapshotStorage:
    """
    In-memory index of one trace session.

    Producers (the trace loader or a live TraceRecorder) call
    ``add_resource()`` / ``add_frame_snapshot()``; viewers query by id or
    snapshot name and subscribe to renderers as they are created.

    Usage:
        storage = SnapshotStorage(blob_store=FileBlobStore("/traces/resources"))
        await storage.load("/traces/run1")
        renderer = storage.snapshot_by_name(page_id, "after-click")
    """

    def __init__(self, blob_store: BlobStore | None = None) -> None:
        self._blob_store = blob_store if blob_store is not None else InMemoryBlobStore()
        self._resources = ResourceIndex()
        self._frames = FrameSnapshotHistory()
        self._channel = SnapshotChannel()

    @property
    def blob_store(self) -> BlobStore:
        return self._blob_store

    @property
    def channel(self) -> SnapshotChannel:
        return self._channel

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def add_resource(self, resource: ResourceSnapshot) -> None:
        self._resources.add(resource)

    def add_frame_snapshot(self, snapshot: FrameSnapshot) -> SnapshotRenderer:
        """
        Append a frame snapshot and build its renderer.

        The renderer sees every resource added before this call. Subscribers
        are notified before this method returns.
        """
        renderer = self._frames.append(snapshot, self._resources.freeze())
        self._channel.publish(renderer)
        return renderer

    def clear(self) -> None:
        """Drop all indexed state. Subscribers stay registered."""
        self._resources.clear()
        self._frames.clear()

    async def load(self, trace_prefix: str) -> LoadStats:
        """Replay ``<prefix>-network.trace`` then ``<prefix>-dom.trace`` into this storage."""
        from tracelens.storage.loader import TraceLoader

        return await TraceLoader(self).load(trace_prefix)

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def resources(self) -> list[ResourceSnapshot]:
        return self._resources.resources()

    def resource_by_id(self, resource_id: str) -> ResourceSnapshot | None:
        return self._resources.resource_by_id(resource_id)

    def resource_content(self, content_hash: str) -> bytes:
        """Raw bytes for ``content_hash``; blob store errors propagate unchanged."""
        return self._blob_store.get(content_hash)

    def snapshot_by_name(self, page_or_frame_id: str, snapshot_name: str) -> SnapshotRenderer | None:
        return self._frames.snapshot_by_name(page_or_frame_id, snapshot_name)

    def frame_history(self, page_or_frame_id: str) -> FrameHistory | None:
        """Read-only copy of the frame (or main frame of the page) history."""
        return self._frames.history(page_or_frame_id)

    def frame_ids(self) -> list[str]:
        return self._frames.frame_ids()

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        return self._channel.subscribe(callback)

    def listen(self) -> tuple[asyncio.Queue[SnapshotRenderer], Callable[[], None]]:
        """Queue of new renderers plus the function that stops delivery to it."""
        return self._channel.queue()
