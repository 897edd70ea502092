"""
cache.py — Per-Type Reference Data Cache

Purpose:
- Hold the complete row set of one small, rarely-changing table in memory.
- Load it from storage once, then answer lookups by code in O(1).
- Rebuild the generated accessor table after every successful load.

State Machine:
    EMPTY ──load──▶ LOADING ──success──▶ LOADED
    LOADED ──reset()──▶ EMPTY
    LOADED ──needs_reload()──▶ STALE_REQUESTED
    STALE_REQUESTED ──next lookup──▶ LOADING ──success──▶ LOADED
    LOADING ──failure──▶ previous state (the next call retries)

Key Rules:
- A per-type lock serializes loads, so N threads hitting a cold cache cause
  one storage read, not N.
- State, mapping and accessor table live in one immutable snapshot that is
  replaced by a single assignment. Readers take the snapshot once, so a
  concurrent reset() can never hand them a LOADED state with an empty table.
- Re-entering a load on the same thread (e.g. a row constructor or the
  on_loaded hook querying the cache) returns the current view instead of
  recursing.
- A refresh after needs_reload() keeps the identity of every row that is
  still present; holders of a reference see the new attribute values.
"""

import enum
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Iterable, Mapping, NamedTuple, Optional, TypeVar, Union

from refdata.core.exceptions import ConfigurationError
from refdata.core.logging import get_logger
from refdata.reference.accessors import AccessorTable
from refdata.reference.codes import canonical_code
from refdata.reference.registry import ReferenceRegistry, registry as default_registry
from refdata.reference.storage import Storage
from refdata.reference.synonyms import SynonymResolver


logger = get_logger(__name__)

T = TypeVar("T")


class CacheState(enum.Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    STALE_REQUESTED = "stale_requested"


class _Snapshot(NamedTuple):
    state: CacheState
    view: Mapping[str, Any]
    codes: AccessorTable


class ReferenceCache(Generic[T]):
    """
    Authoritative in-memory holder of one reference data type.

    Parameters:
        model: the entity class whose rows are cached.
        storage: collaborator implementing refdata.reference.storage.Storage.
        synonyms: alternate name → canonical code, or a SynonymResolver.
        on_loaded: zero-argument hook run after every successful load/refresh.
        mirror_in_tests: whether fixture tooling should copy this table.
        code_attribute: name of the business key attribute on rows.
        registry: registry to join (the process-wide one by default; None to skip).
    """

    def __init__(
        self,
        model: type,
        storage: Storage,
        synonyms: Union[SynonymResolver, Mapping[str, str], None] = None,
        on_loaded: Optional[Callable[[], Any]] = None,
        mirror_in_tests: bool = False,
        code_attribute: str = "code",
        registry: Optional[ReferenceRegistry] = default_registry,
    ):
        self.model = model
        self.name = model.__name__
        self.storage = storage
        if isinstance(synonyms, SynonymResolver):
            self.synonyms = synonyms
        else:
            self.synonyms = SynonymResolver(synonyms)
        self.on_loaded = on_loaded
        self.mirror_in_tests = mirror_in_tests
        self.code_attribute = code_attribute

        self._lock = threading.RLock()
        self._local = threading.local()
        self._snapshot = self._empty_snapshot()

        if registry is not None:
            registry.register(self)

    # ------------------------------------------------------------------ #
    # Introspection
    @property
    def state(self) -> CacheState:
        return self._snapshot.state

    @property
    def loaded(self) -> bool:
        return self._snapshot.state in (CacheState.LOADED, CacheState.STALE_REQUESTED)

    @property
    def loading(self) -> bool:
        return self._snapshot.state is CacheState.LOADING

    @property
    def codes(self) -> AccessorTable:
        """Generated accessors for the current row set (loads if needed)."""
        return self._current().codes

    # ------------------------------------------------------------------ #
    # Lookups
    def all_by_code(self) -> Mapping[str, T]:
        """Read-only mapping of canonical code → cached instance."""
        return self._current().view

    def lookup(self, code: Any) -> Optional[T]:
        """Cached instance for `code` (any case, synonyms allowed), or None."""
        if code is None or str(code) == "":
            return None
        return self.all_by_code().get(self.synonyms.resolve(str(code)))

    def fetch(self, code: Any, session=None) -> Optional[T]:
        """
        Fresh copy of the row for `code`, read from storage rather than the cache.
        Pass `session` to get an instance attached to it.
        """
        cached = self.lookup(code)
        if cached is None:
            return None
        return self.storage.get(self.model, cached.id, session=session)

    # ------------------------------------------------------------------ #
    # Invalidation
    def reset(self) -> None:
        """Drop every cached row and accessor. No storage side effect."""
        with self._lock:
            self._snapshot = self._empty_snapshot()
        logger.debug("Reset reference data for %s", self.name)

    def needs_reload(self) -> None:
        """Refresh rows in place on the next lookup, keeping their identity."""
        with self._lock:
            if self._snapshot.state is CacheState.LOADED:
                self._snapshot = self._snapshot._replace(state=CacheState.STALE_REQUESTED)

    def refresh(self, code: Any) -> Optional[T]:
        """
        Re-read one cached row in place. Other rows, the accessor table and
        the cache state are left alone; returns None for an unknown code.
        """
        instance = self.lookup(code)
        if instance is None:
            return None
        with self._lock:
            self.storage.refresh_attributes(instance)
        return instance

    def force_reload(self) -> Mapping[str, T]:
        """Discard the cache and load again. Instances are replaced."""
        with self._lock:
            self.reset()
            return self.all_by_code()

    # ------------------------------------------------------------------ #
    def _empty_snapshot(self) -> _Snapshot:
        return _Snapshot(CacheState.EMPTY, MappingProxyType({}), AccessorTable.empty(self.name))

    def _current(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot.state is CacheState.LOADED:
            return snapshot
        if getattr(self._local, "loading", False):
            # Same call chain is already loading: hand back what we have
            return snapshot
        with self._lock:
            if self._snapshot.state is CacheState.EMPTY:
                self._load(refresh=False)
            elif self._snapshot.state is CacheState.STALE_REQUESTED:
                self._load(refresh=True)
            return self._snapshot

    def _load(self, refresh: bool) -> None:
        previous = self._snapshot
        self._snapshot = previous._replace(state=CacheState.LOADING)
        self._local.loading = True
        try:
            if refresh:
                rows = self.storage.refresh_all(self.model, list(previous.view.values()))
            else:
                rows = self.storage.find_all(self.model)
            by_code = self._index(rows)
            codes = AccessorTable.build(self, by_code, self.synonyms)
        except Exception:
            self._snapshot = previous
            logger.warning("Loading reference data for %s failed", self.name)
            raise
        finally:
            self._local.loading = False

        self._snapshot = _Snapshot(CacheState.LOADED, MappingProxyType(by_code), codes)
        logger.debug("Loaded %s for %s", list(by_code), self.name)

        if self.on_loaded is not None:
            self.on_loaded()

    def _index(self, rows: Iterable[T]) -> Dict[str, T]:
        by_code: Dict[str, T] = {}
        for row in rows:
            code = canonical_code(getattr(row, self.code_attribute))
            if code in by_code:
                raise ConfigurationError(
                    f"{self.name}: more than one row has code {code!r} once case is ignored."
                )
            by_code[code] = row
        return by_code

    def __repr__(self) -> str:
        snapshot = self._snapshot
        return f"<ReferenceCache {self.name} {snapshot.state.value} ({len(snapshot.view)} codes)>"
