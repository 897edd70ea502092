"""
accessors.py — Generated Named Accessors for Loaded Codes

Purpose:
- After every successful load, expose one accessor per code and one
  `is_<code>` predicate per code, plus aliases for declared synonyms:

      FooType.reference.codes.BAR()              → cached BAR instance
      FooType.reference.codes.BAR.fetch(session) → fresh, session-bound copy
      FooType.reference.codes.is_bar(instance)   → True / False

- Accessors are thin wrappers over `ReferenceCache.lookup`; the cache stays
  the single source of truth.

Key Rules:
- A table is immutable. The cache builds a new one on every load and swaps
  it in whole, so codes removed from storage lose their accessors.
- Two codes (or a code and a synonym) that generate the same name are a
  ConfigurationError, never a silent overwrite.
"""

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

from refdata.core.exceptions import ConfigurationError
from refdata.reference.codes import accessor_name, predicate_name
from refdata.reference.synonyms import SynonymResolver

if TYPE_CHECKING:
    from refdata.reference.cache import ReferenceCache


class CodeAccessor:
    """Callable returning the cached instance for one canonical code."""

    __slots__ = ("_cache", "code", "name")

    def __init__(self, cache: "ReferenceCache", code: str, name: str):
        self._cache = cache
        self.code = code
        self.name = name

    def __call__(self) -> Optional[Any]:
        return self._cache.lookup(self.code)

    def fetch(self, session=None) -> Optional[Any]:
        """Load the row straight from storage instead of the cache."""
        return self._cache.fetch(self.code, session=session)

    def __repr__(self) -> str:
        return f"<CodeAccessor {self._cache.name}.{self.name} → {self.code}>"


def _make_predicate(code: str, code_attribute: str) -> Callable[[Any], bool]:
    def predicate(instance: Any) -> bool:
        value = getattr(instance, code_attribute, None)
        return value is not None and str(value).upper() == code

    predicate.__name__ = predicate_name(code)
    return predicate


class AccessorTable:
    """
    Read-only namespace of generated accessors for one reference data type.

    Use `AccessorTable.build()` rather than the constructor.
    """

    def __init__(self, model_name: str, accessors: Dict[str, CodeAccessor], predicates: Dict[str, Callable[[Any], bool]]):
        object.__setattr__(self, "_model_name", model_name)
        object.__setattr__(self, "_accessors", dict(accessors))
        object.__setattr__(self, "_predicates", dict(predicates))
        self.__dict__.update(accessors)
        self.__dict__.update(predicates)

    @classmethod
    def empty(cls, model_name: str) -> "AccessorTable":
        return cls(model_name, {}, {})

    @classmethod
    def build(
        cls,
        cache: "ReferenceCache",
        codes: Iterable[str],
        synonyms: SynonymResolver,
    ) -> "AccessorTable":
        """
        Generate accessors for canonical `codes` and the synonyms of the type.

        Raises:
            ConfigurationError: if two codes, or a code and a synonym, share a name.
        """
        accessors: Dict[str, CodeAccessor] = {}
        predicates: Dict[str, Callable[[Any], bool]] = {}
        owners: Dict[str, str] = {}

        def claim(name: str, owner: str) -> None:
            if name in owners:
                raise ConfigurationError(
                    f"{cache.name}: {owner} and {owners[name]} both generate accessor {name}."
                )
            owners[name] = owner

        for code in codes:
            name = accessor_name(code)
            claim(name, f"code {code!r}")
            accessors[name] = CodeAccessor(cache, code, name)
            predicates[predicate_name(code)] = _make_predicate(code, cache.code_attribute)

        for alternate, real in synonyms.items():
            name = accessor_name(alternate)
            claim(name, f"synonym {alternate!r}")
            accessors[name] = CodeAccessor(cache, real, name)
            predicates[predicate_name(alternate)] = _make_predicate(real, cache.code_attribute)

        return cls(cache.name, accessors, predicates)

    # ------------------------------------------------------------------ #
    def accessor(self, name: str) -> Optional[CodeAccessor]:
        """Accessor for a code or synonym name, in any case."""
        if name is None or str(name) == "":
            return None
        return self._accessors.get(accessor_name(name))

    def names(self) -> List[str]:
        return sorted(self._accessors)

    def predicates(self) -> List[str]:
        return sorted(self._predicates)

    def __contains__(self, name: object) -> bool:
        return name in self._accessors or name in self._predicates

    def __len__(self) -> int:
        return len(self._accessors)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Accessor table for {self._model_name} is read-only.")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Accessor table for {self._model_name} is read-only.")

    def __repr__(self) -> str:
        return f"<AccessorTable {self._model_name} {self.names()}>"
