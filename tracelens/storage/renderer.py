"""Snapshot renderer — query object bound to one frame snapshot."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from tracelens.core.types import FrameSnapshot, ResourceReference


class SnapshotRenderer:
    """
    State of the world as of one frame snapshot.

    Holds the frozen URL reference view taken when the snapshot was indexed,
    the frame's snapshot history and the position of its own snapshot in it.
    The history list is shared with the index and only ever grows, so the
    renderer reads it through ``snapshots()`` which stops at its own index.
    Rebuilding the page from this state is left to the viewer.
    """

    def __init__(
        self,
        resources: Mapping[str, tuple[ResourceReference, ...]],
        snapshots: Sequence[FrameSnapshot],
        index: int,
    ) -> None:
        if not 0 <= index < len(snapshots):
            raise IndexError(f"snapshot index {index} out of range for {len(snapshots)} snapshots")
        self._resources = resources
        self._snapshots = snapshots
        self._index = index

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"SnapshotRenderer(frame_id={snap.frame_id!r}, "
            f"snapshot_name={snap.snapshot_name!r}, index={self._index})"
        )

    @property
    def index(self) -> int:
        return self._index

    @property
    def snapshot_name(self) -> str | None:
        return self.snapshot().snapshot_name

    @property
    def frame_id(self) -> str:
        return self.snapshot().frame_id

    @property
    def page_id(self) -> str:
        return self.snapshot().page_id

    def snapshot(self) -> FrameSnapshot:
        return self._snapshots[self._index]

    def snapshots(self) -> list[FrameSnapshot]:
        """Frame history up to and including this renderer's snapshot."""
        return list(self._snapshots[: self._index + 1])

    def resource_urls(self) -> list[str]:
        return list(self._resources)

    def references(self, url: str) -> tuple[ResourceReference, ...]:
        return self._resources.get(url, ())

    def resource_id_for_url(self, url: str, frame_id: str | None = None) -> str | None:
        """
        Resolve which resource was active for ``url`` at this snapshot.

        Prefers the most recent fetch made by ``frame_id`` (this renderer's
        frame by default) and falls back to the most recent fetch of the URL
        from any frame. Returns None if the URL was never fetched.
        """
        refs = self._resources.get(url)
        if not refs:
            return None
        wanted = frame_id if frame_id is not None else self.frame_id
        for ref in reversed(refs):
            if ref.frame_id == wanted:
                return ref.resource_id
        return refs[-1].resource_id
