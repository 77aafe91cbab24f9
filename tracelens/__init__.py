from tracelens.capture.recorder import TraceRecorder
from tracelens.core.errors import TraceParseError
from tracelens.core.types import FrameSnapshot, ResourceReference, ResourceSnapshot
from tracelens.storage.blob_store import BlobStore, FileBlobStore, InMemoryBlobStore
from tracelens.storage.channel import SnapshotChannel
from tracelens.storage.loader import LoadStats, TraceLoader, load_trace
from tracelens.storage.renderer import SnapshotRenderer
from tracelens.storage.snapshot_storage import SnapshotStorage

__all__ = [
    "FrameSnapshot",
    "ResourceReference",
    "ResourceSnapshot",
    "TraceParseError",
    # Storage
    "BlobStore",
    "FileBlobStore",
    "InMemoryBlobStore",
    "LoadStats",
    "SnapshotChannel",
    "SnapshotRenderer",
    "SnapshotStorage",
    "TraceLoader",
    "load_trace",
    # Live capture
    "TraceRecorder",
]
