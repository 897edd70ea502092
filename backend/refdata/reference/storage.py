"""
storage.py — Storage Collaborator for Reference Data Caches

Purpose:
- Define the contract the cache needs from the persistence layer:
    * find_all(model)                → every row of the table
    * refresh_all(model, instances)  → every row, reusing `instances` in place
    * refresh_attributes(instance)   → re-read one row into an existing object
    * get(model, ident, session)     → a fresh, session-bound copy of one row
- Provide the SQLAlchemy implementation used by `acts_as_reference_data`.

Key Characteristics:
- Cached rows are detached from their session once read so they outlive it.
- `refresh_all` issues ONE select with `populate_existing`: rows already held
  by the cache keep their identity, new rows come back as new objects.
- SQLAlchemy errors raised while reading become LoadFailure.
- Statements bypass the engine's compiled cache, which would otherwise keep
  every model it ever loaded alive and defeat the weakly-held registry.

This module does NOT:
- Decide when to load (see cache.py).
- Write anything; reference rows are changed directly in the database.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from refdata.core.exceptions import LoadFailure
from refdata.core.logging import get_logger


logger = get_logger(__name__)

UNCACHED = {"compiled_cache": None}


class Storage(Protocol):
    def find_all(self, model: type) -> Sequence[Any]: ...

    def refresh_all(self, model: type, instances: Sequence[Any]) -> Sequence[Any]: ...

    def refresh_attributes(self, instance: Any) -> None: ...

    def get(self, model: type, ident: Any, session: Optional[Any] = None) -> Optional[Any]: ...


class SQLAlchemyStorage:
    """
    Reads reference tables through short-lived SQLAlchemy sessions.

    `session_factory` defaults to the one configured in refdata.core.database,
    resolved lazily so types can be declared before the database is configured.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory

    def _new_session(self) -> Session:
        if self._session_factory is None:
            from refdata.core.database import get_session_factory

            session = get_session_factory()()
        else:
            session = self._session_factory()
        # Compiled statements hold the model class; declared types must stay collectable
        session.connection(execution_options=UNCACHED)
        return session

    # ------------------------------------------------------------------ #
    def find_all(self, model: type) -> Sequence[Any]:
        try:
            with self._new_session() as session:
                rows = session.scalars(select(model)).all()
                session.expunge_all()
        except SQLAlchemyError as e:
            raise LoadFailure(model.__name__, str(e)) from e
        return rows

    def refresh_all(self, model: type, instances: Sequence[Any]) -> Sequence[Any]:
        try:
            with self._new_session() as session:
                # Stray in-memory edits on cached rows must never be flushed
                with session.no_autoflush:
                    for instance in instances:
                        session.add(instance)
                    rows = session.scalars(
                        select(model).execution_options(populate_existing=True)
                    ).all()
                session.expunge_all()
        except SQLAlchemyError as e:
            raise LoadFailure(model.__name__, str(e)) from e
        return rows

    def refresh_attributes(self, instance: Any) -> None:
        try:
            with self._new_session() as session:
                session.add(instance)
                session.refresh(instance)
                session.expunge(instance)
        except SQLAlchemyError as e:
            raise LoadFailure(type(instance).__name__, str(e)) from e

    def get(self, model: type, ident: Any, session: Optional[Session] = None) -> Optional[Any]:
        """
        Fresh copy of one row. With `session`, the result stays attached to it;
        otherwise a private session is used and the result is detached.
        """
        try:
            if session is not None:
                return session.get(
                    model, ident, populate_existing=True, execution_options=UNCACHED
                )
            with self._new_session() as own_session:
                row = own_session.get(model, ident)
                own_session.expunge_all()
                return row
        except SQLAlchemyError as e:
            raise LoadFailure(model.__name__, str(e)) from e
