"""Path store on a relational database, via SQLAlchemy."""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional, Sequence

from sqlalchemy import create_engine, select, update, delete
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from .base import PathStore, dump_payload, load_payload
from .domain import Path, StoredItem, to_path, parent_of, ancestors, path_key
from .exceptions import AlreadyExists, ParentMissing, NotFound, Conflict, \
    BackendUnavailable, InvalidPath, StorageError
from .models import Base, DBNode

logger = logging.getLogger(__name__)


class SQLStore(PathStore):
    """
    Keep path nodes as rows in the ``path_nodes`` table.

    Uniqueness of paths is enforced by the primary key, and conditional
    updates are a single ``UPDATE ... WHERE version = ?`` statement, so the
    guarantees hold across processes sharing one database.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessionmaker = sessionmaker(bind=engine)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Context manager for database transaction."""
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except StorageError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create the node table if it does not exist."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise BackendUnavailable(f'Database error: {e}') from e

    def drop_all(self) -> None:
        """Drop the node table."""
        Base.metadata.drop_all(self.engine)

    def _is_dir(self, session: Session, path: Path) -> Optional[bool]:
        """Whether ``path`` is a directory; ``None`` if nothing is there."""
        if not path:
            return True
        return session.scalar(
            select(DBNode.is_dir).where(DBNode.path == path_key(path))
        )

    def create_directory(self, path: Sequence[str]) -> None:
        path = to_path(path)
        try:
            for prefix in ancestors(path):
                self._create_one_directory(prefix)
        except SQLAlchemyError as e:
            raise BackendUnavailable(f'Database error: {e}') from e

    def _create_one_directory(self, path: Path) -> None:
        try:
            with self.transaction() as session:
                is_dir = self._is_dir(session, path)
                if is_dir is None:
                    session.add(DBNode(path=path_key(path),
                                       parent=path_key(path[:-1]),
                                       is_dir=True, data=None, version=1))
                elif not is_dir:
                    raise AlreadyExists(f'A file exists at {path_key(path)}')
        except IntegrityError:
            # Someone else created it first; only a file there is a problem.
            with self.transaction() as session:
                if not self._is_dir(session, path):
                    raise AlreadyExists(f'A file exists at {path_key(path)}')

    def create_file(self, path: Sequence[str], data: Any) -> StoredItem:
        path = to_path(path)
        parent = parent_of(path)
        raw = dump_payload(data)
        try:
            with self.transaction() as session:
                if not self._is_dir(session, parent):
                    raise ParentMissing(f'No directory at {path_key(parent)}')
                session.add(DBNode(path=path_key(path),
                                   parent=path_key(parent),
                                   is_dir=False, data=raw, version=1))
        except IntegrityError as e:
            raise AlreadyExists(f'Already exists: {path_key(path)}') from e
        except SQLAlchemyError as e:
            raise BackendUnavailable(f'Database error: {e}') from e
        return StoredItem(path, load_payload(path, raw), 1)

    def get_file(self, path: Sequence[str]) -> Optional[StoredItem]:
        path = to_path(path)
        if not path:
            return None
        try:
            with self.transaction() as session:
                row = session.execute(
                    select(DBNode.data, DBNode.version)
                    .where(DBNode.path == path_key(path))
                    .where(DBNode.is_dir.is_(False))
                ).first()
        except SQLAlchemyError as e:
            raise BackendUnavailable(f'Database error: {e}') from e
        if row is None:
            return None
        return StoredItem(path, load_payload(path, row.data), row.version)

    def update_file(self, path: Sequence[str], data: Any,
                    expected_version: Optional[int] = None) -> StoredItem:
        path = to_path(path)
        raw = dump_payload(data)
        key = path_key(path)
        try:
            with self.transaction() as session:
                stmt = update(DBNode) \
                    .where(DBNode.path == key) \
                    .where(DBNode.is_dir.is_(False))
                if expected_version is not None:
                    stmt = stmt.where(DBNode.version == expected_version)
                result = session.execute(
                    stmt.values(data=raw, version=DBNode.version + 1)
                    .execution_options(synchronize_session=False)
                )
                # The row stays locked until commit, so this is our write.
                version = session.scalar(
                    select(DBNode.version)
                    .where(DBNode.path == key)
                    .where(DBNode.is_dir.is_(False))
                )
                if version is None:
                    raise NotFound(f'No file at {key}')
                if result.rowcount != 1:
                    raise Conflict(f'{key} is at version {version}, '
                                   f'expected {expected_version}')
        except SQLAlchemyError as e:
            raise BackendUnavailable(f'Database error: {e}') from e
        return StoredItem(path, load_payload(path, raw), version)

    def delete_file(self, path: Sequence[str]) -> None:
        path = to_path(path)
        if not path:
            raise InvalidPath('The root is not a file')
        try:
            with self.transaction() as session:
                result = session.execute(
                    delete(DBNode)
                    .where(DBNode.path == path_key(path))
                    .where(DBNode.is_dir.is_(False))
                )
                if result.rowcount != 1:
                    raise NotFound(f'No file at {path_key(path)}')
        except SQLAlchemyError as e:
            raise BackendUnavailable(f'Database error: {e}') from e


def get_sql_store(uri: str, create: bool = True) -> SQLStore:
    """Build a :class:`.SQLStore` for a database URI."""
    engine = create_engine(uri, pool_pre_ping=True)
    store = SQLStore(engine)
    if create:
        store.create_all()
    return store
