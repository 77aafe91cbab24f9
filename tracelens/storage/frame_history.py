"""Per-frame append-only snapshot history."""

from __future__ import annotations

from dataclasses import dataclass, field

from tracelens.core.types import FrameSnapshot
from tracelens.storage.renderer import SnapshotRenderer
from tracelens.storage.resource_index import ResourceView


@dataclass
class _FrameRecords:
    snapshots: list[FrameSnapshot] = field(default_factory=list)
    renderers: list[SnapshotRenderer] = field(default_factory=list)


@dataclass(frozen=True)
class FrameHistory:
    """Read-only copy of one frame's snapshots and their renderers, index-aligned."""

    frame_id: str
    snapshots: tuple[FrameSnapshot, ...] = ()
    renderers: tuple[SnapshotRenderer, ...] = ()

    def __len__(self) -> int:
        return len(self.snapshots)


class FrameSnapshotHistory:
    """
    Frame id -> snapshot records, plus a page id -> main frame id index.

    A page id is registered when the first snapshot of a main frame creates
    that frame's history; lookups by page id resolve through it to the frame.
    """

    def __init__(self) -> None:
        self._frames: dict[str, _FrameRecords] = {}
        self._page_main_frames: dict[str, str] = {}

    def append(self, snapshot: FrameSnapshot, resources: ResourceView) -> SnapshotRenderer:
        records = self._frames.get(snapshot.frame_id)
        if records is None:
            records = _FrameRecords()
            self._frames[snapshot.frame_id] = records
            if snapshot.is_main_frame:
                self._page_main_frames[snapshot.page_id] = snapshot.frame_id

        records.snapshots.append(snapshot)
        renderer = SnapshotRenderer(resources, records.snapshots, len(records.snapshots) - 1)
        records.renderers.append(renderer)
        return renderer

    def _resolve(self, page_or_frame_id: str) -> str:
        return self._page_main_frames.get(page_or_frame_id, page_or_frame_id)

    def history(self, page_or_frame_id: str) -> FrameHistory | None:
        frame_id = self._resolve(page_or_frame_id)
        records = self._frames.get(frame_id)
        if records is None:
            return None
        return FrameHistory(
            frame_id=frame_id,
            snapshots=tuple(records.snapshots),
            renderers=tuple(records.renderers),
        )

    def snapshot_by_name(self, page_or_frame_id: str, snapshot_name: str) -> SnapshotRenderer | None:
        records = self._frames.get(self._resolve(page_or_frame_id))
        if records is None:
            return None
        return next(
            (r for r in records.renderers if r.snapshot_name == snapshot_name),
            None,
        )

    def frame_ids(self) -> list[str]:
        return list(self._frames)

    def page_ids(self) -> list[str]:
        return list(self._page_main_frames)

    def clear(self) -> None:
        self._frames.clear()
        self._page_main_frames.clear()
