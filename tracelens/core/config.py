"""Default locations and trace file naming."""

from __future__ import annotations

import os

NETWORK_TRACE_SUFFIX = "-network.trace"
DOM_TRACE_SUFFIX = "-dom.trace"

RESOURCES_DIR_ENV = "TRACELENS_RESOURCES_DIR"
_FALLBACK_RESOURCES_DIR = os.path.join(os.path.expanduser("~"), ".tracelens", "resources")


def default_resources_dir() -> str:
    """Blob directory used when none is passed explicitly."""
    return os.environ.get(RESOURCES_DIR_ENV) or _FALLBACK_RESOURCES_DIR


def network_trace_path(trace_prefix: str) -> str:
    return trace_prefix + NETWORK_TRACE_SUFFIX


def dom_trace_path(trace_prefix: str) -> str:
    return trace_prefix + DOM_TRACE_SUFFIX
