"""
Unit tests for canonical codes and generated names.
"""

import pytest

from refdata.core.exceptions import ConfigurationError
from refdata.reference.codes import accessor_name, canonical_code, predicate_name


@pytest.mark.parametrize("value", ["bar", "BAR", "Bar", "bAr"])
def test_canonical_code_is_uppercase(value):
    assert canonical_code(value) == "BAR"


def test_canonical_code_accepts_non_strings():
    assert canonical_code(42) == "42"


@pytest.mark.parametrize("value", [None, ""])
def test_canonical_code_rejects_missing_codes(value):
    with pytest.raises(ConfigurationError):
        canonical_code(value)


def test_accessor_name_replaces_non_identifier_characters():
    assert accessor_name("in-use") == "IN_USE"
    assert accessor_name("on hold") == "ON_HOLD"


def test_accessor_name_prefixes_leading_digit():
    assert accessor_name("2fa") == "_2FA"
    assert accessor_name("2fa").isidentifier()


def test_predicate_name():
    assert predicate_name("bar") == "is_bar"
    assert predicate_name("In-Use") == "is_in_use"
