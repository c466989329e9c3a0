"""Read-only view over the flat entity store.

Entities live in ``ApiState.resources`` addressed by insertion position.
Embedded relations reference their targets by local id, which the write
path assigns as the target's store position. :meth:`EntityStore.get_by_id`
is the lookup used for that secondary address; :meth:`EntityStore.get` is
the lookup used for ``QueryState.data``.

Neither lookup raises: an address that does not resolve returns ``None``
so partially fetched pages can still be rendered.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from restcache.state.snapshot import EntityRecord


def _as_index(value: Any) -> int | None:
    # bool is an int subclass; True must not address position 1
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if value < 0:
        return None
    return value


class EntityStore:
    """Lookup façade over one ``resources`` tuple.

    The store never copies: returned entities are the objects held by the
    snapshot.
    """

    __slots__ = ("_resources",)

    def __init__(self, resources: Sequence[EntityRecord]):
        self._resources = resources

    @property
    def resources(self) -> Sequence[EntityRecord]:
        return self._resources

    def get(self, position: Any) -> EntityRecord | None:
        """Entity at a store position, or ``None``."""
        index = _as_index(position)
        if index is None or index >= len(self._resources):
            return None
        return self._resources[index]

    def get_by_id(self, local_id: Any) -> EntityRecord | None:
        """Entity addressed by a local id from an ``_embedded`` map, or ``None``."""
        return self.get(local_id)

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[EntityRecord]:
        return iter(self._resources)

    def __repr__(self) -> str:
        return f"EntityStore(size={len(self._resources)})"


__all__ = ["EntityStore"]
