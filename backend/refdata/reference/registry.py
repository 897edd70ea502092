"""
registry.py — Process-Wide Registry of Reference Data Types

Purpose:
- Track every ReferenceCache so one call can reset, reload or list them all.
- Feed fixture-export tooling: `mirrored()` returns the types flagged to be
  copied into an isolated test database.

Key Rules:
- Only weak references are held. A type that is redefined or discarded (as
  happens in isolated test scenarios) is not kept alive by the registry.
- Dead references are pruned lazily, on the next enumeration.
- The registry lock only guards the membership list; resets and loads run
  outside it so they never wait on another type's load lock while holding it.
"""

import threading
import weakref
from typing import TYPE_CHECKING, List

from refdata.core.logging import get_logger

if TYPE_CHECKING:
    from refdata.reference.cache import ReferenceCache


logger = get_logger(__name__)


class ReferenceRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._refs: List["weakref.ref[ReferenceCache]"] = []

    def register(self, cache: "ReferenceCache") -> None:
        with self._lock:
            if any(ref() is cache for ref in self._refs):
                return
            self._refs.append(weakref.ref(cache))
        logger.debug("Registered reference data type %s", cache.name)

    def unregister(self, cache: "ReferenceCache") -> None:
        with self._lock:
            self._refs = [ref for ref in self._refs if ref() is not None and ref() is not cache]

    def enumerate(self) -> List["ReferenceCache"]:
        """Live registered caches, in registration order."""
        with self._lock:
            live = []
            alive_refs = []
            for ref in self._refs:
                cache = ref()
                if cache is None:
                    continue
                live.append(cache)
                alive_refs.append(ref)
            pruned = len(self._refs) - len(alive_refs)
            self._refs = alive_refs
        if pruned:
            logger.debug("Pruned %d unloaded reference data type(s) from registry", pruned)
        return live

    def mirrored(self) -> List["ReferenceCache"]:
        """Types whose rows should be copied into isolated test storage."""
        return [cache for cache in self.enumerate() if cache.mirror_in_tests]

    def reset_all(self) -> None:
        """Clear the in-memory rows of every registered type."""
        for cache in self.enumerate():
            cache.reset()

    def needs_reload_all(self) -> None:
        for cache in self.enumerate():
            cache.needs_reload()

    def load_all(self) -> None:
        """Force a fresh load of every registered type (application start)."""
        for cache in self.enumerate():
            cache.force_reload()

    def __len__(self) -> int:
        return len(self.enumerate())


# Singleton used by `acts_as_reference_data` and the lifecycle hooks.
registry = ReferenceRegistry()


def reset_reference_data() -> None:
    """Clear out all in-memory cached objects for all reference data types."""
    registry.reset_all()
