"""
declarative.py — Marking SQLAlchemy Models as Reference Data

Usage:

    @acts_as_reference_data(synonyms={"closed": "done"}, mirror_in_tests=True)
    class TicketStatus(ReferenceDataMixin, Base):
        __tablename__ = "ticket_status"

        id = Column(Integer, primary_key=True)
        code = Column(String, unique=True, nullable=False)
        description = Column(String)

    TicketStatus.lookup("done")            # cached instance (any case)
    TicketStatus.codes().DONE()            # same instance
    TicketStatus.codes().CLOSED()          # same instance, via synonym
    TicketStatus.lookup("open").is_code("done")  # False

The decorator validates synonyms, builds the ReferenceCache, installs the
MutationGuard and registers the type with the process-wide registry. Any
misconfiguration is raised here, at class definition time.
"""

from typing import Any, Callable, Mapping, Optional, Union

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from refdata.core.exceptions import ConfigurationError
from refdata.core.logging import get_logger
from refdata.reference.accessors import AccessorTable
from refdata.reference.cache import ReferenceCache
from refdata.reference.guard import MutationGuard
from refdata.reference.storage import SQLAlchemyStorage, Storage
from refdata.reference.synonyms import SynonymResolver


logger = get_logger(__name__)


class ReferenceDataMixin:
    """Class and instance helpers shared by every reference data model."""

    # `reference` (a ReferenceCache) is attached by acts_as_reference_data

    @classmethod
    def all_by_code(cls) -> Mapping[str, Any]:
        return cls.reference.all_by_code()

    @classmethod
    def lookup(cls, code: Any) -> Optional[Any]:
        return cls.reference.lookup(code)

    @classmethod
    def codes(cls) -> AccessorTable:
        return cls.reference.codes

    def is_code(self, name: str) -> bool:
        """True when this row's code equals `name` (case-insensitive, synonyms allowed)."""
        if name is None or str(name) == "":
            return False
        reference = type(self).reference
        value = getattr(self, reference.code_attribute, None)
        return value is not None and str(value).upper() == reference.synonyms.resolve(name)

    def full_instance(self, session=None) -> Optional[Any]:
        """This row re-read from storage; attached to `session` when one is given."""
        return type(self).reference.storage.get(type(self), self.id, session=session)


def acts_as_reference_data(
    synonyms: Optional[Mapping[str, str]] = None,
    on_loaded: Union[Callable[[], Any], str, None] = None,
    mirror_in_tests: bool = False,
    session_factory: Optional[Callable[[], Any]] = None,
    code_attribute: str = "code",
    storage: Optional[Storage] = None,
) -> Callable[[type], type]:
    """
    Class decorator turning a mapped model into cached reference data.

    Parameters:
        synonyms: alternate name → canonical code.
        on_loaded: zero-argument hook, or the name of a classmethod on the
            model, run after every successful load to rebuild derived indexes.
        mirror_in_tests: flag read by fixture tooling via registry.mirrored().
        session_factory: sessions to read with; defaults to refdata.core.database.
        code_attribute: column holding the business key.
        storage: a custom storage collaborator (overrides session_factory).
    """
    resolver = SynonymResolver(synonyms)

    def decorate(cls: type) -> type:
        if not issubclass(cls, ReferenceDataMixin):
            raise ConfigurationError(
                f"{cls.__name__} must inherit from ReferenceDataMixin to act as reference data."
            )
        try:
            mapper = inspect(cls)
        except NoInspectionAvailable as e:
            raise ConfigurationError(f"{cls.__name__} is not a mapped SQLAlchemy model.") from e
        if code_attribute not in mapper.column_attrs.keys():
            raise ConfigurationError(
                f"{cls.__name__} has no {code_attribute!r} column to use as reference data code."
            )

        hook = on_loaded
        if isinstance(on_loaded, str):
            hook = getattr(cls, on_loaded, None)
            if hook is None:
                raise ConfigurationError(
                    f"{cls.__name__} has no classmethod {on_loaded!r} to use as on_loaded hook."
                )

        cls.reference = ReferenceCache(
            cls,
            storage or SQLAlchemyStorage(session_factory),
            synonyms=resolver,
            on_loaded=hook,
            mirror_in_tests=mirror_in_tests,
            code_attribute=code_attribute,
        )
        MutationGuard(cls.__name__, code_attribute).install(cls)

        logger.debug("Declared %s as reference data", cls.__name__)
        return cls

    return decorate
