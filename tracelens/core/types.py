"""Shared record types for captured traces."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from tracelens.core.errors import TraceParseError

# JSON key -> dataclass attribute for optional ResourceSnapshot fields
_RESOURCE_OPTIONAL_KEYS: dict[str, str] = {
    "pageId": "page_id",
    "contentType": "content_type",
    "method": "method",
    "status": "status",
    "timestamp": "timestamp",
    "requestHeaders": "request_headers",
    "responseHeaders": "response_headers",
}

_FRAME_OPTIONAL_KEYS: dict[str, str] = {
    "isMainFrame": "is_main_frame",
    "snapshotName": "snapshot_name",
    "frameUrl": "frame_url",
    "timestamp": "timestamp",
    "doctype": "doctype",
    "html": "html",
    "viewport": "viewport",
    "resourceOverrides": "resource_overrides",
}


@dataclass(frozen=True)
class ResourceSnapshot:
    """
    One captured network fetch.

    Headers are stored as (name, value) pairs and ``extra`` as a read-only
    mapping, so a record cannot change after it is indexed.
    """

    resource_id: str
    frame_id: str
    url: str
    content_hash: str  # sha1 of the response body; names the blob file
    page_id: str = ""
    content_type: str = ""
    method: str = "GET"
    status: int = 200
    timestamp: float = 0.0
    request_headers: tuple[tuple[str, str], ...] = ()
    response_headers: tuple[tuple[str, str], ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "request_headers", _header_pairs(self.request_headers, "requestHeaders"))
        object.__setattr__(self, "response_headers", _header_pairs(self.response_headers, "responseHeaders"))
        object.__setattr__(self, "extra", _frozen_mapping(self.extra))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ResourceSnapshot:
        if not isinstance(d, dict):
            raise TraceParseError(f"resource record must be an object, got {type(d).__name__}")
        # Older traces name the body hash responseSha1
        hash_key = "responseSha1" if "responseSha1" in d and "contentHash" not in d else "contentHash"
        kwargs: dict[str, Any] = {
            "resource_id": _required_str(d, "resourceId"),
            "frame_id": _required_str(d, "frameId"),
            "url": _required_str(d, "url"),
            "content_hash": _required_str(d, hash_key),
        }
        for key, attr in _RESOURCE_OPTIONAL_KEYS.items():
            if key in d and d[key] is not None:
                kwargs[attr] = d[key]
        known = {"resourceId", "frameId", "url", "contentHash", "responseSha1", *_RESOURCE_OPTIONAL_KEYS}
        kwargs["extra"] = {k: v for k, v in d.items() if k not in known}
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "resourceId": self.resource_id,
            "frameId": self.frame_id,
            "url": self.url,
            "contentHash": self.content_hash,
            "pageId": self.page_id,
            "contentType": self.content_type,
            "method": self.method,
            "status": self.status,
            "timestamp": self.timestamp,
            "requestHeaders": [{"name": n, "value": v} for n, v in self.request_headers],
            "responseHeaders": [{"name": n, "value": v} for n, v in self.response_headers],
            **self.extra,
        }


@dataclass(frozen=True)
class ResourceReference:
    """A (frame, resource) pair recorded against a URL in arrival order."""

    frame_id: str
    resource_id: str


@dataclass(frozen=True)
class FrameSnapshot:
    """
    Point-in-time DOM capture of a single frame.

    ``viewport``, ``resource_overrides`` and ``extra`` are frozen on
    construction. ``html`` is passed through untouched.
    """

    frame_id: str
    page_id: str
    is_main_frame: bool = False
    snapshot_name: str | None = None  # not unique; first match wins on lookup
    frame_url: str = ""
    timestamp: float = 0.0
    doctype: str | None = None
    html: Any = None  # opaque rendering payload
    viewport: Mapping[str, int] | None = None
    resource_overrides: tuple[Mapping[str, Any], ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.viewport is not None:
            object.__setattr__(self, "viewport", _frozen_mapping(self.viewport, "viewport"))
        if not isinstance(self.resource_overrides, (list, tuple)):
            raise TraceParseError("'resourceOverrides' must be a list")
        overrides = tuple(_frozen_mapping(o, "resourceOverrides") for o in self.resource_overrides)
        object.__setattr__(self, "resource_overrides", overrides)
        object.__setattr__(self, "extra", _frozen_mapping(self.extra))

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> FrameSnapshot:
        if not isinstance(d, dict):
            raise TraceParseError(f"frame snapshot record must be an object, got {type(d).__name__}")
        kwargs: dict[str, Any] = {
            "frame_id": _required_str(d, "frameId"),
            "page_id": _required_str(d, "pageId"),
        }
        for key, attr in _FRAME_OPTIONAL_KEYS.items():
            if key in d and d[key] is not None:
                kwargs[attr] = d[key]
        if not isinstance(kwargs.get("is_main_frame", False), bool):
            raise TraceParseError("'isMainFrame' must be a boolean")
        name = kwargs.get("snapshot_name")
        if name is not None and not isinstance(name, str):
            raise TraceParseError("'snapshotName' must be a string")
        known = {"frameId", "pageId", *_FRAME_OPTIONAL_KEYS}
        kwargs["extra"] = {k: v for k, v in d.items() if k not in known}
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "frameId": self.frame_id,
            "pageId": self.page_id,
            "isMainFrame": self.is_main_frame,
            "frameUrl": self.frame_url,
            "timestamp": self.timestamp,
            "doctype": self.doctype,
            "html": self.html,
            "viewport": dict(self.viewport) if self.viewport is not None else None,
            "resourceOverrides": [dict(o) for o in self.resource_overrides],
            **self.extra,
        }
        if self.snapshot_name is not None:
            d["snapshotName"] = self.snapshot_name
        return d


def _required_str(d: dict[str, Any], key: str) -> str:
    value = d.get(key)
    if value is None:
        raise TraceParseError(f"missing required field {key!r}")
    if not isinstance(value, str):
        raise TraceParseError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _frozen_mapping(value: Any, key: str = "extra") -> Mapping[str, Any]:
    if isinstance(value, MappingProxyType):
        return value
    if not isinstance(value, Mapping):
        raise TraceParseError(f"field {key!r} must be an object, got {type(value).__name__}")
    return MappingProxyType(dict(value))


def _header_pairs(headers: Any, key: str) -> tuple[tuple[str, str], ...]:
    """Accept ``[{"name": ..., "value": ...}]``, a mapping or (name, value) pairs."""
    if isinstance(headers, Mapping):
        headers = list(headers.items())
    if not isinstance(headers, (list, tuple)):
        raise TraceParseError(f"field {key!r} must be a list, got {type(headers).__name__}")
    pairs: list[tuple[str, str]] = []
    for header in headers:
        if isinstance(header, Mapping) and "name" in header and "value" in header:
            pairs.append((str(header["name"]), str(header["value"])))
        elif isinstance(header, (list, tuple)) and len(header) == 2:
            pairs.append((str(header[0]), str(header[1])))
        else:
            raise TraceParseError(f"malformed entry in {key!r}: {header!r}")
    return tuple(pairs)
