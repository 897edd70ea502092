"""
Unit tests for SynonymResolver.
"""

import pytest

from refdata.core.exceptions import ConfigurationError
from refdata.reference.synonyms import SynonymResolver


def test_resolves_synonym_to_canonical_code():
    resolver = SynonymResolver({"barre": "bar"})

    assert resolver.resolve("barre") == "BAR"
    assert resolver.resolve("BARRE") == "BAR"
    assert resolver.is_synonym("Barre")


def test_unknown_names_resolve_to_themselves():
    resolver = SynonymResolver({"barre": "bar"})

    assert resolver.resolve("baz") == "BAZ"
    assert not resolver.is_synonym("baz")


def test_empty_resolver():
    resolver = SynonymResolver()

    assert len(resolver) == 0
    assert list(resolver.items()) == []


def test_synonym_of_itself_is_rejected():
    with pytest.raises(ConfigurationError):
        SynonymResolver({"Bar": "bar"})


def test_synonyms_folding_to_same_accessor_are_rejected():
    with pytest.raises(ConfigurationError):
        SynonymResolver({"on-hold": "paused", "ON_HOLD": "paused"})


def test_synonym_chains_are_rejected():
    with pytest.raises(ConfigurationError):
        SynonymResolver({"a": "b", "b": "c"})
