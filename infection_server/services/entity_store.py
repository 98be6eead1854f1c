# infection_server/services/entity_store.py
"""Id-keyed storage for mobile entities."""

from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from infection_server.models.entities import MobileEntity

E = TypeVar("E", bound=MobileEntity)


class EntityStore(Generic[E]):
    """Mapping of entity id to mutable entity state.

    All mutation happens on the event loop between ticks, so no locking is
    needed. ``values()`` and ``ids()`` return copies so callers may mutate the
    store while iterating.
    """

    def __init__(self):
        self._entities: Dict[str, E] = {}

    def upsert(self, entity_id: str, entity: E) -> E:
        self._entities[entity_id] = entity
        return entity

    def remove(self, entity_id: str) -> Optional[E]:
        return self._entities.pop(entity_id, None)

    def get(self, entity_id: str) -> Optional[E]:
        return self._entities.get(entity_id)

    def for_each(self, fn: Callable[[E], None]) -> None:
        for entity in self.values():
            fn(entity)

    def values(self) -> List[E]:
        return list(self._entities.values())

    def ids(self) -> List[str]:
        return list(self._entities)

    def clear(self) -> None:
        self._entities.clear()

    def __contains__(self, entity_id) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[E]:
        return iter(self.values())
