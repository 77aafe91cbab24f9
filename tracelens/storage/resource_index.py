"""Resource index: ordered resources, id lookup and per-URL reference lists."""

from __future__ import annotations

from tracelens.core.types import ResourceReference, ResourceSnapshot

# URL -> frozen references, as handed to renderers
ResourceView = dict[str, tuple[ResourceReference, ...]]


class ResourceIndex:
    """
    Append-only index of captured resources.

    Ids are not checked for uniqueness: a repeated id overwrites the id map
    entry while both records stay in the ordered list.
    """

    def __init__(self) -> None:
        self._resources: list[ResourceSnapshot] = []
        self._by_id: dict[str, ResourceSnapshot] = {}
        self._by_url: dict[str, list[ResourceReference]] = {}

    def __len__(self) -> int:
        return len(self._resources)

    def add(self, resource: ResourceSnapshot) -> None:
        self._by_id[resource.resource_id] = resource
        self._resources.append(resource)
        self._by_url.setdefault(resource.url, []).append(
            ResourceReference(frame_id=resource.frame_id, resource_id=resource.resource_id)
        )

    def resources(self) -> list[ResourceSnapshot]:
        """Return a copy of all resources in insertion order."""
        return list(self._resources)

    def resource_by_id(self, resource_id: str) -> ResourceSnapshot | None:
        return self._by_id.get(resource_id)

    def references(self, url: str) -> tuple[ResourceReference, ...]:
        return tuple(self._by_url.get(url, ()))

    def urls(self) -> list[str]:
        return list(self._by_url)

    def freeze(self) -> ResourceView:
        """
        Point-in-time copy of the URL reference map.

        Each reference list is copied into a tuple, so later additions for a
        URL already present here are not visible through the returned view.
        """
        return {url: tuple(refs) for url, refs in self._by_url.items()}

    def clear(self) -> None:
        self._resources = []
        self._by_id.clear()
        self._by_url.clear()
