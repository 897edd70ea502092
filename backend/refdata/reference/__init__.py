"""
Reference data caching: load small lookup tables once, look rows up by code.
"""

from refdata.reference.accessors import AccessorTable, CodeAccessor
from refdata.reference.cache import CacheState, ReferenceCache
from refdata.reference.codes import accessor_name, canonical_code, predicate_name
from refdata.reference.declarative import ReferenceDataMixin, acts_as_reference_data
from refdata.reference.guard import MutationGuard
from refdata.reference.registry import ReferenceRegistry, registry, reset_reference_data
from refdata.reference.storage import SQLAlchemyStorage, Storage
from refdata.reference.synonyms import SynonymResolver

__all__ = [
    "AccessorTable",
    "CacheState",
    "CodeAccessor",
    "MutationGuard",
    "ReferenceCache",
    "ReferenceDataMixin",
    "ReferenceRegistry",
    "SQLAlchemyStorage",
    "Storage",
    "SynonymResolver",
    "accessor_name",
    "acts_as_reference_data",
    "canonical_code",
    "predicate_name",
    "registry",
    "reset_reference_data",
]
