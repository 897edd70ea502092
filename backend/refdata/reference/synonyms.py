"""
synonyms.py — Alternate Names for Reference Data Codes

Synonyms are declared once with the type, e.g.

    @acts_as_reference_data(synonyms={"active": "enabled"})

and map an alternate name to a canonical code. They are static: they do not
depend on the loaded rows and are validated before the first load.
"""

from typing import Dict, Iterator, Mapping, Optional, Tuple

from refdata.core.exceptions import ConfigurationError
from refdata.reference.codes import accessor_name, canonical_code


class SynonymResolver:
    """
    Resolve alternate names to canonical codes.

    Validation (raises ConfigurationError):
    - a synonym that folds to its own target
    - two synonyms whose accessor names collide
    """

    def __init__(self, synonyms: Optional[Mapping[str, str]] = None):
        self._synonyms: Dict[str, str] = {}
        by_name: Dict[str, str] = {}

        for alternate, real in (synonyms or {}).items():
            alternate_code = canonical_code(alternate)
            real_code = canonical_code(real)
            if alternate_code == real_code:
                raise ConfigurationError(
                    f"Synonym {alternate!r} resolves to itself; drop it or point it at another code."
                )
            name = accessor_name(alternate_code)
            if name in by_name:
                raise ConfigurationError(
                    f"Synonyms {by_name[name]!r} and {alternate!r} both generate accessor {name}."
                )
            by_name[name] = alternate
            self._synonyms[alternate_code] = real_code

        # Chains are ambiguous once predicates are generated
        for alternate_code, real_code in self._synonyms.items():
            if real_code in self._synonyms:
                raise ConfigurationError(
                    f"Synonym {alternate_code} points at {real_code}, which is itself a synonym."
                )

    def resolve(self, name: str) -> str:
        """Return the canonical code for `name`, following a synonym if declared."""
        code = canonical_code(name)
        return self._synonyms.get(code, code)

    def is_synonym(self, name: str) -> bool:
        return canonical_code(name) in self._synonyms

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._synonyms.items())

    def __len__(self) -> int:
        return len(self._synonyms)

    def __repr__(self) -> str:
        return f"<SynonymResolver {self._synonyms}>"
