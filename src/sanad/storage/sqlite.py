"""SQLite key-value backend built on SQLAlchemy."""

from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from sqlalchemy import create_engine, delete
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.exceptions import StorageError
from ..core.time import utc_now
from .schema import Base, KeyValueEntry, StorageMetadata

T = TypeVar("T")

SCHEMA_VERSION = "1.0.0"


def init_database(db_path: str) -> sessionmaker[Session]:
    """Create tables, stamp the schema version and return a session factory."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)

    session_maker = sessionmaker(bind=engine)

    with session_maker() as session:
        if session.get(StorageMetadata, "schema_version") is None:
            session.add(StorageMetadata(key="schema_version", value=SCHEMA_VERSION))
            session.commit()

    return session_maker


@contextmanager
def transaction(session: Session) -> Generator[Session]:
    """Commit on success, roll back on any exception."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise


class SQLiteStorage:
    """Stores each key as one row of ``kv_entries``."""

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        try:
            self._session_maker = init_database(self.db_path)
        except (OSError, SQLAlchemyError) as e:
            raise StorageError(
                f"Cannot open storage database {self.db_path}: {e}",
                details={"path": self.db_path},
            ) from e

    def _run(self, operation: Callable[[Session], T], description: str) -> T:
        try:
            with self._session_maker() as session, transaction(session):
                return operation(session)
        except SQLAlchemyError as e:
            raise StorageError(f"{description} failed: {e}", details={"path": self.db_path}) from e

    def get(self, key: str) -> str | None:
        def op(session: Session) -> str | None:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry is not None else None

        return self._run(op, f"Reading {key}")

    def set(self, key: str, value: str) -> None:
        def op(session: Session) -> None:
            stmt = insert(KeyValueEntry).values(key=key, value=value, updated_at=utc_now())
            stmt = stmt.on_conflict_do_update(
                index_elements=["key"],
                set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
            )
            session.execute(stmt)

        self._run(op, f"Writing {key}")

    def delete(self, key: str) -> None:
        def op(session: Session) -> Any:
            return session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))

        self._run(op, f"Deleting {key}")

    def clear(self) -> None:
        self._run(lambda session: session.execute(delete(KeyValueEntry)), "Clearing storage")

    def schema_version(self) -> str | None:
        def op(session: Session) -> str | None:
            row = session.get(StorageMetadata, "schema_version")
            return row.value if row is not None else None

        return self._run(op, "Reading schema version")
