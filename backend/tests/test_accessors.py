"""
Tests for generated accessor tables.
"""

import pytest

from refdata.core.exceptions import ConfigurationError
from refdata.reference.accessors import AccessorTable, CodeAccessor
from refdata.reference.cache import CacheState, ReferenceCache
from refdata.reference.registry import ReferenceRegistry
from refdata.reference.synonyms import SynonymResolver


@pytest.fixture
def cache(row_type, memory_storage):
    return ReferenceCache(row_type, memory_storage, registry=ReferenceRegistry())


def test_table_lists_accessors_and_predicates(cache):
    table = AccessorTable.build(cache, ["BAR", "BAZ"], SynonymResolver({"barre": "bar"}))

    assert table.names() == ["BAR", "BARRE", "BAZ"]
    assert table.predicates() == ["is_bar", "is_barre", "is_baz"]
    assert len(table) == 3
    assert isinstance(table.BAR, CodeAccessor)


def test_accessor_calls_through_cache(cache):
    table = AccessorTable.build(cache, ["BAR"], SynonymResolver())

    assert cache.state is CacheState.EMPTY
    assert table.BAR() is cache.lookup("bar")
    assert table.BAR.code == "BAR"


def test_accessor_lookup_by_name_is_case_insensitive(cache):
    table = cache.codes

    assert table.accessor("bar") is table.BAR
    assert table.accessor("Bop") is None
    assert table.accessor("") is None
    assert table.accessor(None) is None


def test_codes_with_punctuation_get_identifier_names(row_type, make_storage):
    storage = make_storage({1: {"code": "in-use"}, 2: {"code": "2fa"}})
    cache = ReferenceCache(row_type, storage, registry=ReferenceRegistry())

    assert cache.codes.IN_USE().code == "in-use"
    assert cache.codes._2FA().code == "2fa"
    assert cache.codes.is_in_use(cache.lookup("IN-USE"))


def test_codes_colliding_on_name_are_rejected(row_type, make_storage):
    storage = make_storage({1: {"code": "in-use"}, 2: {"code": "in_use"}})
    cache = ReferenceCache(row_type, storage, registry=ReferenceRegistry())

    with pytest.raises(ConfigurationError):
        cache.all_by_code()
    assert cache.state is CacheState.EMPTY


def test_synonym_colliding_with_code_is_rejected(cache):
    with pytest.raises(ConfigurationError):
        AccessorTable.build(cache, ["BAR", "BAZ"], SynonymResolver({"baz": "bar"}))


def test_table_is_read_only(cache):
    table = cache.codes

    with pytest.raises(AttributeError):
        table.BOP = table.BAR
    with pytest.raises(AttributeError):
        del table.BAR


def test_predicate_handles_missing_code(cache, row_type):
    assert not cache.codes.is_bar(row_type(id=9, code=None))
