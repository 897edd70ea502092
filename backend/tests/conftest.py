"""
Shared fixtures for reference data tests.

- An in-memory SQLite database seeded with foo_types (bar, baz) and goo_types (gar, gaz).
- `define_reference_type` builds a fresh declarative model per test, the way
  application code would declare one, and unregisters it on teardown.
- `MemoryStorage` is a storage collaborator without a database, used where
  tests need to control timing, failures or garbage collection.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional

import pytest
from sqlalchemy import Column, Integer, String, create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from refdata.reference import ReferenceDataMixin, acts_as_reference_data, registry


# -----------------------------------------------------------------------------
# Database fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        for table, codes in (("foo_types", ("bar", "baz")), ("goo_types", ("gar", "gaz"))):
            conn.execute(text(
                f"CREATE TABLE {table} (id INTEGER PRIMARY KEY, code VARCHAR NOT NULL, description VARCHAR)"
            ))
            for code in codes:
                conn.execute(
                    text(f"INSERT INTO {table}(code, description) VALUES(:code, :description)"),
                    {"code": code, "description": f"{code} type"},
                )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def execute_sql(engine) -> Callable[..., None]:
    """Change rows behind the application's back, like a DBA would."""
    def execute(statement: str, **params: Any) -> None:
        with engine.begin() as conn:
            conn.execute(text(statement), params)
    return execute


@pytest.fixture
def count_selects(engine):
    """List of SELECT statements issued while the test runs."""
    statements: List[str] = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    yield statements
    event.remove(engine, "before_cursor_execute", before_cursor_execute)


@pytest.fixture
def define_reference_type(session_factory):
    defined = []

    def define(name: str, table: str, **options: Any) -> type:
        Base = declarative_base()
        namespace = {
            "__tablename__": table,
            "id": Column(Integer, primary_key=True),
            "code": Column(String, nullable=False),
            "description": Column(String),
        }
        namespace.update(options.pop("namespace", {}))
        model = type(Base)(name, (ReferenceDataMixin, Base), namespace)
        options.setdefault("session_factory", session_factory)
        model = acts_as_reference_data(**options)(model)
        defined.append(model)
        return model

    yield define

    for model in defined:
        registry.unregister(model.reference)


@pytest.fixture
def foo_type(define_reference_type):
    return define_reference_type("FooType", "foo_types")


@pytest.fixture
def goo_type(define_reference_type):
    return define_reference_type("GooType", "goo_types")


# -----------------------------------------------------------------------------
# Storage without a database
# -----------------------------------------------------------------------------

class Row:
    def __init__(self, id: int, code: str, description: Optional[str] = None):
        self.id = id
        self.code = code
        self.description = description

    def __repr__(self) -> str:
        return f"<Row {self.id} {self.code}>"


class MemoryStorage:
    """
    Storage collaborator over a dict of id → column values.

    `delay` slows every read, `fail_with` makes the next reads raise, and
    `on_read` runs inside each read (to simulate load-time code that queries
    the cache).
    """

    def __init__(self, rows: Dict[int, Dict[str, Any]], delay: float = 0.0):
        self.rows = rows
        self.delay = delay
        self.fail_with: Optional[Exception] = None
        self.on_read: Optional[Callable[[], None]] = None
        self.reads = 0
        self._lock = threading.Lock()

    def _read(self) -> None:
        with self._lock:
            self.reads += 1
        if self.delay:
            time.sleep(self.delay)
        if self.on_read is not None:
            self.on_read()
        if self.fail_with is not None:
            raise self.fail_with

    def find_all(self, model):
        self._read()
        return [model(id=ident, **values) for ident, values in self.rows.items()]

    def refresh_all(self, model, instances):
        self._read()
        existing = {instance.id: instance for instance in instances}
        rows = []
        for ident, values in self.rows.items():
            instance = existing.get(ident)
            if instance is None:
                instance = model(id=ident, **values)
            else:
                for name, value in values.items():
                    setattr(instance, name, value)
            rows.append(instance)
        return rows

    def refresh_attributes(self, instance):
        for name, value in self.rows[instance.id].items():
            setattr(instance, name, value)

    def get(self, model, ident, session=None):
        values = self.rows.get(ident)
        return None if values is None else model(id=ident, **values)


@pytest.fixture
def memory_rows() -> Dict[int, Dict[str, Any]]:
    return {
        1: {"code": "bar", "description": "bar type"},
        2: {"code": "baz", "description": "baz type"},
    }


@pytest.fixture
def memory_storage(memory_rows) -> MemoryStorage:
    return MemoryStorage(memory_rows)


@pytest.fixture
def row_type():
    return Row


@pytest.fixture
def make_storage() -> Callable[..., MemoryStorage]:
    return MemoryStorage
