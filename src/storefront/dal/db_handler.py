"""
SQLAlchemy implementation of the Data Access Layer (DAL).

``Database`` owns the engine and session factory of one Lambda process.
All reads and writes go through ``Database.transaction()``, which yields a
``UnitOfWork`` bound to a single session, commits when the block completes
and rolls back on any exception. Integrity errors raised by the driver are
translated into ``ConstraintViolationError`` so the handlers never see
dialect specific exceptions.
"""

import re
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from sqlalchemy import create_engine, delete, event, func, inspect, select, update
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.dal.connection import resolve_database_url
from storefront.dal.tables import Base
from storefront.handlers.models.env_vars import StorefrontEnvVars, get_handler_env_vars
from storefront.handlers.utils.errors import ConstraintKind, ConstraintViolationError
from storefront.handlers.utils.observability import logger, tracer

ModelT = TypeVar('ModelT', bound=Base)

PG_UNIQUE_VIOLATION = '23505'
PG_FOREIGN_KEY_VIOLATION = '23503'
MYSQL_DUPLICATE_ENTRY = 1062
MYSQL_ROW_IS_REFERENCED = 1451
MYSQL_NO_REFERENCED_ROW = 1452

_PG_KEY_FIELDS = re.compile(r'Key \((.+?)\)=')
_PG_REFERENCED_TABLE = re.compile(r'is not present in table "([^"]+)"')
_PG_REFERENCING_TABLE = re.compile(r'is still referenced from table "([^"]+)"')
_MYSQL_REFERENCED_TABLE = re.compile(r'REFERENCES `([^`]+)`')
_MYSQL_UNIQUE_KEY = re.compile(r"for key '([^']+)'")
_SQLITE_UNIQUE = 'UNIQUE constraint failed:'
_SQLITE_FOREIGN_KEY = 'FOREIGN KEY constraint failed'


def _split_fields(raw: str) -> List[str]:
    return [part.strip().split('.')[-1] for part in raw.split(',') if part.strip()]


def translate_integrity_error(error: IntegrityError) -> Optional[ConstraintViolationError]:
    """
    Map a driver integrity error onto a tagged constraint violation.

    Args:
        error: IntegrityError raised by SQLAlchemy

    Returns:
        The matching ConstraintViolationError, or None if the error is not a
        unique or foreign key violation
    """
    orig = error.orig
    message = str(orig) if orig is not None else str(error)

    # PostgreSQL: psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    sqlstate = getattr(orig, 'pgcode', None) or getattr(orig, 'sqlstate', None)
    if sqlstate == PG_UNIQUE_VIOLATION:
        match = _PG_KEY_FIELDS.search(message)
        return ConstraintViolationError(
            ConstraintKind.UNIQUE,
            fields=_split_fields(match.group(1)) if match else None,
            detail=message,
        )
    if sqlstate == PG_FOREIGN_KEY_VIOLATION:
        match = _PG_REFERENCED_TABLE.search(message) or _PG_REFERENCING_TABLE.search(message)
        fields = _PG_KEY_FIELDS.search(message)
        return ConstraintViolationError(
            ConstraintKind.FOREIGN_KEY,
            fields=_split_fields(fields.group(1)) if fields else None,
            relation=match.group(1) if match else None,
            detail=message,
        )

    # MySQL drivers put the server errno first in args
    args = getattr(orig, 'args', None) or ()
    errno = args[0] if args and isinstance(args[0], int) else None
    if errno == MYSQL_DUPLICATE_ENTRY:
        match = _MYSQL_UNIQUE_KEY.search(message)
        return ConstraintViolationError(
            ConstraintKind.UNIQUE,
            fields=[match.group(1).split('.')[-1]] if match else None,
            detail=message,
        )
    if errno in (MYSQL_ROW_IS_REFERENCED, MYSQL_NO_REFERENCED_ROW):
        match = _MYSQL_REFERENCED_TABLE.search(message)
        return ConstraintViolationError(
            ConstraintKind.FOREIGN_KEY,
            relation=match.group(1) if match else None,
            detail=message,
        )

    if message.startswith(_SQLITE_UNIQUE):
        return ConstraintViolationError(
            ConstraintKind.UNIQUE,
            fields=_split_fields(message[len(_SQLITE_UNIQUE):]),
            detail=message,
        )
    if message.startswith(_SQLITE_FOREIGN_KEY):
        return ConstraintViolationError(ConstraintKind.FOREIGN_KEY, detail=message)

    return None


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def create_db_engine(url: URL, env_vars: StorefrontEnvVars) -> Engine:
    """
    Create the engine for the resolved URL.

    SQLite (used by the test suite) gets foreign key enforcement and, for
    in-memory databases, a single shared connection. Every other backend
    gets a small pre-pinged pool sized for one Lambda instance.
    """
    if url.get_backend_name() == 'sqlite':
        options: dict = {'echo': env_vars.DB_ECHO}
        if url.database in (None, '', ':memory:'):
            options.update(poolclass=StaticPool, connect_args={'check_same_thread': False})
        engine = create_engine(url, **options)
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=env_vars.DB_POOL_SIZE,
        max_overflow=env_vars.DB_MAX_OVERFLOW,
        pool_recycle=env_vars.DB_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
        echo=env_vars.DB_ECHO,
    )


def _primary_key(model: Type[Base]):
    # the mapped attribute, not the Table column, so ORM-enabled updates can evaluate it
    mapper = inspect(model)
    return getattr(model, mapper.get_property_by_column(mapper.primary_key[0]).key)


class UnitOfWork:
    """Data access operations bound to the session of one transaction."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, model: Type[ModelT], key: Any, options: Sequence[Any] = ()) -> Optional[ModelT]:
        """Fetch a row by primary key, reloading it and its eager relations."""
        return self.session.get(model, key, options=list(options), populate_existing=True)

    def exists(self, model: Type[Base], key: Any) -> bool:
        pk = _primary_key(model)
        return self.session.scalar(select(pk).where(pk == key).limit(1)) is not None

    def find_first(self, model: Type[ModelT], *criteria: Any, options: Sequence[Any] = ()) -> Optional[ModelT]:
        stmt = select(model).where(*criteria).options(*options).limit(1)
        return self.session.scalars(stmt).first()

    def count(self, model: Type[Base], *criteria: Any) -> int:
        stmt = select(func.count()).select_from(model).where(*criteria)
        return self.session.scalar(stmt) or 0

    def find_all(
        self,
        model: Type[ModelT],
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Sequence[Any] = (),
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        options: Sequence[Any] = (),
    ) -> Tuple[List[ModelT], int]:
        """
        List rows matching equality filters.

        Args:
            model: Mapped class to query
            filters: Column name to value; None values are ignored
            order_by: Ordering expressions
            offset: Rows to skip
            limit: Maximum rows to return
            options: Loader options such as ``selectinload``

        Returns:
            Tuple of the requested page of rows and the total matching count
        """
        criteria = [
            getattr(model, column) == value
            for column, value in (filters or {}).items()
            if value is not None
        ]
        total = self.count(model, *criteria)

        stmt = select(model).where(*criteria).order_by(*order_by).options(*options)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.scalars(stmt).all()), total

    def insert(self, model: Type[ModelT], **values: Any) -> ModelT:
        """Insert a row and flush so generated keys are populated."""
        row = model(**values)
        self.session.add(row)
        self.session.flush()
        return row

    def update(self, model: Type[Base], key: Any, values: Mapping[str, Any]) -> None:
        """
        Apply a partial update to one row.

        Raises:
            ConstraintViolationError: NOT_FOUND when no row has the key
        """
        pk = _primary_key(model)
        if not values:
            if not self.exists(model, key):
                raise ConstraintViolationError(ConstraintKind.NOT_FOUND, relation=model.__tablename__)
            return

        result = self.session.execute(
            update(model).where(pk == key).values(**values),
            execution_options={'synchronize_session': 'evaluate'},
        )
        if result.rowcount == 0:
            raise ConstraintViolationError(ConstraintKind.NOT_FOUND, relation=model.__tablename__)

    def delete(self, model: Type[Base], key: Any) -> None:
        """
        Delete one row by primary key.

        Raises:
            ConstraintViolationError: NOT_FOUND when no row has the key
        """
        deleted = self.delete_many(model, _primary_key(model) == key)
        if deleted == 0:
            raise ConstraintViolationError(ConstraintKind.NOT_FOUND, relation=model.__tablename__)

    def delete_many(self, model: Type[Base], *criteria: Any) -> int:
        result = self.session.execute(
            delete(model).where(*criteria),
            execution_options={'synchronize_session': False},
        )
        return result.rowcount


class Database:
    """Process wide engine, session factory and transaction primitive."""

    def __init__(self, url: Union[str, URL, None] = None, env_vars: Optional[StorefrontEnvVars] = None) -> None:
        """
        Args:
            url: Explicit database URL; resolved from configuration when omitted
            env_vars: Settings; read from the environment when omitted
        """
        self._url = make_url(url) if url is not None else None
        self._env_vars = env_vars
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            env_vars = self._env_vars or get_handler_env_vars()
            url = self._url or resolve_database_url(env_vars)
            self._engine = create_db_engine(url, env_vars)
            logger.info('Database engine created', extra={'backend': url.get_backend_name(), 'database': url.database})
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        """
        Run a block of data access operations atomically.

        Raises:
            ConstraintViolationError: If the database rejected a write with a
                unique or foreign key violation
        """
        session = self.session_factory()
        try:
            yield UnitOfWork(session)
            session.commit()
        except IntegrityError as e:
            session.rollback()
            violation = translate_integrity_error(e)
            if violation is None:
                raise
            logger.warning('Constraint violation', extra={'kind': violation.kind.value, 'fields': violation.fields, 'relation': violation.relation})
            raise violation from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @tracer.capture_method
    def create_schema(self) -> None:
        """Create all mapped tables; used by tests and local development."""
        Base.metadata.create_all(self.engine)

    def drop_schema(self) -> None:
        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None
