"""
codes.py — Canonical Form of Reference Data Codes

Every lookup, mapping key and generated accessor name is derived from the
canonical code: the upper-cased string form of the stored value.

    canonical_code("bar")     → "BAR"
    accessor_name("in-use")   → "IN_USE"
    predicate_name("in-use")  → "is_in_use"
"""

import re
from typing import Any

from refdata.core.exceptions import ConfigurationError

_NON_IDENTIFIER = re.compile(r"\W")


def canonical_code(value: Any) -> str:
    """
    Normalize a code for lookups.

    Raises ConfigurationError for None / empty codes since they cannot be keyed.
    """
    if value is None:
        raise ConfigurationError("Reference data codes cannot be None.")
    code = str(value).upper()
    if not code:
        raise ConfigurationError("Reference data codes cannot be empty.")
    return code


def accessor_name(value: Any) -> str:
    """Identifier used for the class-level accessor of a code."""
    name = _NON_IDENTIFIER.sub("_", canonical_code(value))
    if name[0].isdigit():
        name = f"_{name}"
    return name


def predicate_name(value: Any) -> str:
    """Identifier used for the `is_<code>` predicate of a code."""
    return f"is_{accessor_name(value).lower()}"
