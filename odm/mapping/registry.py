"""Process-wide cache of entity mappings."""

import threading
from collections.abc import Callable

from odm.exceptions import MappingError
from odm.mapping.entity_mapping import EntityMapping, derive_mapping

MappingFactory = Callable[[], EntityMapping]


class MappingRegistry:
    """Resolves and caches the mapping of each entity type.

    A mapping is computed on first use, from the factory registered for the
    type or else derived from the type's fields, and is immutable afterwards.
    Concurrent first resolutions may compute in parallel; the first value
    published wins and the others are discarded.
    """

    def __init__(self) -> None:
        self._factories: dict[type, MappingFactory] = {}
        self._mappings: dict[type, EntityMapping] = {}
        self._lock = threading.Lock()

    def register(self, entity_type: type, factory: MappingFactory) -> None:
        """Register the factory that builds the mapping of an entity type."""
        with self._lock:
            if entity_type in self._mappings:
                raise MappingError(f"Mapping of {entity_type.__name__} is already resolved", entity_type)
            self._factories[entity_type] = factory

    def resolve(self, entity_type: type) -> EntityMapping:
        """Return the mapping of an entity type, computing it once."""
        mapping = self._mappings.get(entity_type)
        if mapping is not None:
            return mapping

        computed = self._compute(entity_type)
        with self._lock:
            return self._mappings.setdefault(entity_type, computed)

    def is_resolved(self, entity_type: type) -> bool:
        return entity_type in self._mappings

    def _compute(self, entity_type: type) -> EntityMapping:
        factory = self._factories.get(entity_type)
        mapping = factory() if factory is not None else derive_mapping(entity_type)
        if mapping.entity_type is not entity_type:
            raise MappingError(
                f"Factory for {entity_type.__name__} built a mapping of {mapping.entity_type.__name__}",
                entity_type,
            )
        return mapping
