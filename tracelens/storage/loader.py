"""Trace loader — replays persisted network and DOM logs into a SnapshotStorage."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

from tracelens.core.config import dom_trace_path, network_trace_path
from tracelens.core.errors import TraceParseError
from tracelens.core.types import FrameSnapshot, ResourceSnapshot
from tracelens.storage.blob_store import FileBlobStore
from tracelens.storage.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LoadStats:
    resources: int = 0
    snapshots: int = 0


class TraceLoader:
    """
    Reads ``<prefix>-network.trace`` and ``<prefix>-dom.trace``.

    All network records are replayed before any DOM record, in file order.
    Each file is decoded completely before its records are replayed, so a
    malformed line aborts the load with TraceParseError before anything from
    that file is indexed. Records replayed from the network log stay indexed
    when the DOM log is the one that fails.
    """

    def __init__(self, storage: SnapshotStorage) -> None:
        self._storage = storage

    async def load(self, trace_prefix: str) -> LoadStats:
        stats = LoadStats()

        network_path = network_trace_path(trace_prefix)
        data = await _read_bytes(network_path)
        resources = list(_parse_lines(network_path, data, ResourceSnapshot.from_dict))
        for resource in resources:
            self._storage.add_resource(resource)
            stats.resources += 1
        logger.debug("Replayed %d resources from %s", stats.resources, network_path)

        dom_path = dom_trace_path(trace_prefix)
        data = await _read_bytes(dom_path)
        snapshots = list(_parse_lines(dom_path, data, FrameSnapshot.from_dict))
        for snapshot in snapshots:
            self._storage.add_frame_snapshot(snapshot)
            stats.snapshots += 1
        logger.debug("Replayed %d frame snapshots from %s", stats.snapshots, dom_path)

        logger.info(
            "Loaded trace %s: %d resources, %d frame snapshots",
            trace_prefix, stats.resources, stats.snapshots,
        )
        return stats


async def load_trace(trace_prefix: str, resources_dir: str | None = None) -> SnapshotStorage:
    """Build a file-backed SnapshotStorage and load the trace into it."""
    storage = SnapshotStorage(blob_store=FileBlobStore(resources_dir))
    await TraceLoader(storage).load(trace_prefix)
    return storage


async def _read_bytes(path: str) -> bytes:
    # File I/O runs in the default executor to keep the event loop free
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _read_file, path)


def _read_file(path: str) -> bytes:
    return Path(path).read_bytes()


def _parse_lines(path: str, data: bytes, decode: Callable[[Any], T]):
    """Yield one decoded record per non-blank line; raise on the first bad one."""
    for line_number, raw in enumerate(data.split(b"\n"), start=1):
        try:
            line = raw.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise TraceParseError(
                f"invalid UTF-8 at byte {exc.start}", path=path, line_number=line_number
            ) from exc
        if not line:
            continue
        try:
            record = decode(json.loads(line))
        except json.JSONDecodeError as exc:
            raise TraceParseError(
                f"invalid JSON: {exc.msg}", path=path, line_number=line_number
            ) from exc
        except TraceParseError as exc:
            raise TraceParseError(exc.reason, path=path, line_number=line_number) from exc
        yield record
