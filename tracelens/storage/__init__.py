from tracelens.storage.blob_store import BlobStore, FileBlobStore, InMemoryBlobStore
from tracelens.storage.channel import SnapshotChannel
from tracelens.storage.frame_history import FrameHistory, FrameSnapshotHistory
from tracelens.storage.loader import LoadStats, TraceLoader, load_trace
from tracelens.storage.renderer import SnapshotRenderer
from tracelens.storage.resource_index import ResourceIndex
from tracelens.storage.snapshot_storage import SnapshotStorage

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "FrameHistory",
    "FrameSnapshotHistory",
    "InMemoryBlobStore",
    "LoadStats",
    "ResourceIndex",
    "SnapshotChannel",
    "SnapshotRenderer",
    "SnapshotStorage",
    "TraceLoader",
    "load_trace",
]
