"""Snapshot channel that delivers each new renderer to subscribers."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Callable

from tracelens.storage.renderer import SnapshotRenderer

SnapshotCallback = Callable[[SnapshotRenderer], None]


class SnapshotChannel:
    """
    Synchronous callback registry.

    ``publish()`` runs every subscriber in subscription order before it
    returns, so a subscriber always sees a renderer whose resource view matches
    the index at the moment the snapshot was added. Subscriber exceptions
    propagate to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: list[SnapshotCallback] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._subscribers.remove(callback)

        return unsubscribe

    def queue(self) -> tuple[asyncio.Queue[SnapshotRenderer], Callable[[], None]]:
        """
        Subscribe an unbounded asyncio.Queue for async consumers.

        Returns the queue and the function that unsubscribes it; the queue
        keeps growing until that function is called.
        """
        q: asyncio.Queue[SnapshotRenderer] = asyncio.Queue()
        return q, self.subscribe(q.put_nowait)

    def publish(self, renderer: SnapshotRenderer) -> None:
        # Copy so a subscriber may unsubscribe itself while being called
        for callback in list(self._subscribers):
            callback(renderer)
