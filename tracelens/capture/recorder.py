"""Live capture — records a Playwright page into a SnapshotStorage."""

from __future__ import annotations

import hashlib
import logging
import time

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Frame, Page, Response

from tracelens.core.types import FrameSnapshot, ResourceSnapshot
from tracelens.storage.renderer import SnapshotRenderer
from tracelens.storage.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)


class TraceRecorder:
    """
    Single live producer for a SnapshotStorage.

    Network responses are hashed with sha1, their bodies written to the
    storage's blob store and indexed as resources. ``snapshot()`` captures the
    DOM of every frame of a page under one snapshot name.

    Playwright does not expose stable page/frame ids, so the recorder assigns
    ``page@N`` / ``frame@N`` ids the first time it sees each object.
    """

    def __init__(self, storage: SnapshotStorage) -> None:
        self._storage = storage
        self._page_ids: dict[Page, str] = {}
        self._frame_ids: dict[Frame, str] = {}
        self._resource_count = 0
        self._attached: set[Page] = set()

    @property
    def storage(self) -> SnapshotStorage:
        return self._storage

    def attach(self, page: Page) -> None:
        """Start recording network responses of ``page``. No-op if already attached."""
        if page in self._attached:
            return
        page.on("response", self.record_response)
        self._attached.add(page)

    def detach(self, page: Page) -> None:
        if page not in self._attached:
            return
        page.remove_listener("response", self.record_response)
        self._attached.discard(page)

    def page_id(self, page: Page) -> str:
        if page not in self._page_ids:
            self._page_ids[page] = f"page@{len(self._page_ids) + 1}"
        return self._page_ids[page]

    def frame_id(self, frame: Frame) -> str:
        if frame not in self._frame_ids:
            self._frame_ids[frame] = f"frame@{len(self._frame_ids) + 1}"
        return self._frame_ids[frame]

    async def record_response(self, response: Response) -> ResourceSnapshot | None:
        """
        Index one network response.

        Returns None when the response has no frame (service worker requests)
        or its body is unavailable (redirects, aborted or evicted responses);
        those are logged and skipped without touching the blob store.
        """
        try:
            frame = response.frame
        except PlaywrightError as exc:
            logger.warning("Skipping response without a frame %s: %s", response.url, exc)
            return None
        try:
            body = await response.body()
        except PlaywrightError as exc:
            logger.warning("Skipping response body for %s: %s", response.url, exc)
            return None

        content_hash = hashlib.sha1(body).hexdigest()
        self._storage.blob_store.put(content_hash, body)

        self._resource_count += 1
        headers = response.headers
        resource = ResourceSnapshot(
            resource_id=f"resource@{self._resource_count}",
            frame_id=self.frame_id(frame),
            page_id=self.page_id(frame.page),
            url=response.url,
            content_hash=content_hash,
            content_type=headers.get("content-type", ""),
            method=response.request.method,
            status=response.status,
            timestamp=time.time() * 1000,
            response_headers=tuple(headers.items()),
        )
        self._storage.add_resource(resource)
        return resource

    async def snapshot(self, page: Page, name: str | None = None) -> list[SnapshotRenderer]:
        """
        Capture every frame of ``page`` and index one FrameSnapshot per frame.

        Returns the renderers in frame order (main frame first). Frames that
        detach mid-capture are logged and skipped.
        """
        page_id = self.page_id(page)
        main_frame = page.main_frame
        viewport = page.viewport_size
        renderers: list[SnapshotRenderer] = []

        for frame in page.frames:
            try:
                html = await frame.content()
            except PlaywrightError as exc:
                logger.warning("Skipping frame %s in snapshot %r: %s", frame.url, name, exc)
                continue
            snap = FrameSnapshot(
                frame_id=self.frame_id(frame),
                page_id=page_id,
                is_main_frame=frame is main_frame,
                snapshot_name=name,
                frame_url=frame.url,
                timestamp=time.time() * 1000,
                html=html,
                viewport=viewport or None,
            )
            renderers.append(self._storage.add_frame_snapshot(snap))

        logger.debug("Captured snapshot %r of %s (%d frames)", name, page_id, len(renderers))
        return renderers

    def reset(self) -> None:
        """Forget assigned ids and clear the storage for a new session."""
        self._page_ids.clear()
        self._frame_ids.clear()
        self._resource_count = 0
        self._storage.clear()
