"""
refdata — In-memory caching for reference data tables.
"""

from refdata.core.exceptions import (
    ConfigurationError,
    LoadFailure,
    MutationRejected,
    ReferenceDataError,
)
from refdata.reference import (
    CacheState,
    ReferenceCache,
    ReferenceDataMixin,
    acts_as_reference_data,
    registry,
    reset_reference_data,
)

__all__ = [
    "CacheState",
    "ConfigurationError",
    "LoadFailure",
    "MutationRejected",
    "ReferenceCache",
    "ReferenceDataError",
    "ReferenceDataMixin",
    "acts_as_reference_data",
    "registry",
    "reset_reference_data",
]
