"""
exceptions.py — Error Taxonomy for Reference Data

- LoadFailure: storage read during load/refresh failed. Never cached; the next call retries.
- MutationRejected: create / destroy / code change attempted through the application.
- ConfigurationError: colliding accessor or synonym names, or a type declared incorrectly.

An unknown code is not an error: lookups return None.
"""

from typing import Optional


class ReferenceDataError(Exception):
    """Base class for every error raised by the reference data package."""


class LoadFailure(ReferenceDataError):
    """Reading a reference data table from storage failed."""

    def __init__(self, model: str, message: str):
        super().__init__(f"Failed to load reference data for {model}: {message}")
        self.model = model


class MutationRejected(ReferenceDataError):
    """A write that would change reference data identity was attempted."""

    def __init__(self, model: str, operation: str, message: str, instance: Optional[object] = None):
        super().__init__(message)
        self.model = model
        self.operation = operation
        self.instance = instance


class ConfigurationError(ReferenceDataError):
    """A reference data type was declared with conflicting or invalid options."""
