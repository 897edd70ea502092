"""
guard.py — Immutability Guard for Reference Data Rows

Purpose:
- Reject the three writes that would change the identity of reference data:
    * creating a row
    * destroying a row
    * changing a row's code
- Each check returns a MutationRejected (or None) so callers that own a write
  path can decide how to surface it; `install()` wires the checks into
  SQLAlchemy so they raise before anything is sent to the database.

Updates of other columns are allowed. The cache is not told about them:
call `needs_reload()` (or reset) to see the change through cached accessors.
"""

from typing import Any, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm.base import NO_VALUE, NEVER_SET

from refdata.core.exceptions import MutationRejected
from refdata.core.logging import get_logger


logger = get_logger(__name__)


class MutationGuard:
    def __init__(self, model_name: str, code_attribute: str = "code"):
        self.model_name = model_name
        self.code_attribute = code_attribute

    # ------------------------------------------------------------------ #
    # Checks
    def check_create(self, instance: Any = None) -> Optional[MutationRejected]:
        return MutationRejected(
            self.model_name,
            "create",
            f"{self.model_name} is reference data and cannot be created through the application. "
            "Create the data in the database and reload the reference data instead.",
            instance,
        )

    def check_destroy(self, instance: Any = None) -> Optional[MutationRejected]:
        return MutationRejected(
            self.model_name,
            "destroy",
            f"{self.model_name} is reference data and cannot be destroyed through the application. "
            "Delete the data in the database and reload the reference data instead.",
            instance,
        )

    def check_code_change(self, old: Any, new: Any, instance: Any = None) -> Optional[MutationRejected]:
        if old in (NO_VALUE, NEVER_SET, None) or old == new:
            return None
        return MutationRejected(
            self.model_name,
            "update_code",
            f"{self.model_name} codes cannot be changed through the application "
            f"({old!r} → {new!r}). Change the data in the database and reload the reference data instead.",
            instance,
        )

    def enforce(self, rejection: Optional[MutationRejected]) -> None:
        if rejection is None:
            return
        logger.warning("Rejected %s on %s", rejection.operation, self.model_name)
        raise rejection

    # ------------------------------------------------------------------ #
    # SQLAlchemy wiring
    def install(self, model: type) -> None:
        """Attach the checks to `model`'s mapper and code attribute events."""
        event.listen(model, "before_insert", self._before_insert)
        event.listen(model, "before_delete", self._before_delete)
        event.listen(model, "before_update", self._before_update)
        event.listen(getattr(model, self.code_attribute), "set", self._on_code_set, active_history=True)

    def _before_insert(self, mapper, connection, target) -> None:
        self.enforce(self.check_create(target))

    def _before_delete(self, mapper, connection, target) -> None:
        self.enforce(self.check_destroy(target))

    def _before_update(self, mapper, connection, target) -> None:
        history = inspect(target).attrs[self.code_attribute].history
        if not history.has_changes():
            return
        old = history.deleted[0] if history.deleted else None
        new = history.added[0] if history.added else None
        self.enforce(self.check_code_change(old, new, target))

    def _on_code_set(self, target, value, oldvalue, initiator) -> None:
        # New rows get a code before insert; they are rejected at flush instead
        if not inspect(target).has_identity:
            return
        self.enforce(self.check_code_change(oldvalue, value, target))
