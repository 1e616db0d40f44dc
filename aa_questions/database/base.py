"""
Database Module for aa_questions - Base Components
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Core database components: the shared connection, schema migrations and
the generic model every table class derives from.
"""

import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple
from aa_questions.logging_config import DatabaseLogger


MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'migrations')


class DatabaseError(Exception):
    """Custom exception for database operations."""
    pass


class ConstraintViolationError(DatabaseError):
    """A statement violated a schema constraint (foreign key, NOT NULL, unique)."""
    pass


class RecordAlreadyPersistedError(DatabaseError):
    """Tried to insert a record that already has an id."""
    pass


class RecordNotPersistedError(DatabaseError):
    """Tried to update or delete a record that has no id yet."""
    pass


class RecordNotFoundError(DatabaseError):
    """No row matches the record's id."""
    pass


class DatabaseConnection:
    """Owns the SQLite connection and provides connection context."""

    def __init__(self, conn_params: Dict[str, Any]):
        self._validate_config(conn_params)
        self.db_logger = DatabaseLogger()
        self.logger = self.db_logger.logger
        self.database = conn_params['database']

        try:
            self.conn = sqlite3.connect(
                self.database,
                timeout=float(conn_params.get('timeout', 5.0)),
                detect_types=sqlite3.PARSE_DECLTYPES
            )
        except sqlite3.Error as e:
            self.db_logger.log_error('connect', e)
            raise DatabaseError(f"Could not open database {self.database}: {e}") from e

        # Rows come back addressable by column name
        self.conn.row_factory = sqlite3.Row
        if conn_params.get('foreign_keys', True):
            self.conn.execute("PRAGMA foreign_keys = ON")
        self.db_logger.log_connection(f"opened {self.database}")

    def _validate_config(self, conn_params: Dict[str, Any]) -> None:
        """Validate database connection parameters."""
        required_keys = ['database']
        for key in required_keys:
            if not conn_params.get(key):
                raise KeyError(f'No {key.title()} provided for DB connection')

    @contextmanager
    def get_connection(self):
        """Context manager for the shared connection; rolls back on failure."""
        if self.conn is None:
            raise DatabaseError("Database connection is closed")
        try:
            yield self.conn
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise ConstraintViolationError(f"Constraint violated: {e}") from e
        except sqlite3.Error as e:
            self.conn.rollback()
            raise DatabaseError(f"Database operation failed: {e}") from e

    def health_check(self) -> bool:
        """Check database connection health."""
        try:
            with self.get_connection() as conn:
                conn.execute("SELECT 1")
                return True
        except DatabaseError:
            return False

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            self.db_logger.log_connection(f"closed {self.database}")


_shared_connection: Optional[DatabaseConnection] = None


def get_shared_connection() -> DatabaseConnection:
    """Get the connection every model class talks to."""
    if _shared_connection is None:
        raise DatabaseError("No database connection has been opened")
    return _shared_connection


def set_shared_connection(connection: DatabaseConnection) -> None:
    """Register the process-wide connection."""
    global _shared_connection
    _shared_connection = connection


def clear_shared_connection(connection: DatabaseConnection) -> None:
    """Forget the shared connection if it is this one."""
    global _shared_connection
    if _shared_connection is connection:
        _shared_connection = None


class MigrationManager:
    """Handles database schema migrations."""

    def __init__(self, db_connection: DatabaseConnection, migrations_dir: str = MIGRATIONS_DIR):
        self.db = db_connection
        self.migrations_dir = migrations_dir
        self.logger = db_connection.logger

    def get_current_version(self) -> int:
        """Get the current database version."""
        try:
            with self.db.get_connection() as conn:
                table = conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
                ).fetchone()

                if table is None:
                    conn.execute("""
                        CREATE TABLE schema_migrations (
                            version INTEGER PRIMARY KEY,
                            applied_at TEXT DEFAULT CURRENT_TIMESTAMP
                        )
                    """)
                    conn.commit()
                    return 0

                result = conn.execute("SELECT MAX(version) FROM schema_migrations").fetchone()
                return result[0] if result and result[0] is not None else 0

        except DatabaseError as e:
            self.logger.error(f"Error checking migration version: {e}")
            return 0

    def run_migrations(self) -> bool:
        """Run all pending migrations."""
        try:
            current_version = self.get_current_version()
            migration_files = self._get_migration_files()

            pending_migrations = [
                (version, filename) for version, filename in migration_files
                if version > current_version
            ]

            if not pending_migrations:
                self.logger.info("No pending migrations")
                return True

            with self.db.get_connection() as conn:
                for version, filename in pending_migrations:
                    self.logger.info(f"Running migration {version}: {filename}")

                    filepath = os.path.join(self.migrations_dir, filename)
                    with open(filepath, 'r') as f:
                        migration_sql = f.read()

                    # One transaction per file; a failing statement undoes the whole file
                    conn.execute("BEGIN")
                    for statement in self._split_statements(migration_sql):
                        conn.execute(statement)

                    conn.execute("INSERT INTO schema_migrations (version) VALUES (?)", (version,))
                    conn.commit()

                    self.logger.info(f"Completed migration {version}")

            return True

        except (DatabaseError, OSError) as e:
            self.logger.error(f"Migration failed: {e}", exc_info=True)
            return False

    @staticmethod
    def _split_statements(migration_sql: str) -> List[str]:
        """
        Split a migration file into complete statements.

        Statement boundaries come from sqlite3.complete_statement, so
        semicolons inside string literals, comments or trigger bodies
        stay in their statement. Comment-only fragments are dropped.
        """
        statements = []
        buffer = ''
        for line in migration_sql.splitlines():
            pieces = line.split(';')
            for piece in pieces[:-1]:
                buffer += piece + ';'
                if sqlite3.complete_statement(buffer):
                    statements.append(buffer)
                    buffer = ''
            buffer += pieces[-1] + '\n'
        statements.append(buffer)

        stripped = (MigrationManager._strip_leading_comments(statement) for statement in statements)
        return [statement for statement in stripped if statement]

    @staticmethod
    def _strip_leading_comments(sql: str) -> str:
        lines = sql.strip().splitlines()
        while lines and (not lines[0].strip() or lines[0].strip().startswith('--')):
            lines.pop(0)
        return '\n'.join(lines).strip()

    def _get_migration_files(self) -> List[Tuple[int, str]]:
        """Get list of migration files sorted by version."""
        migrations = []

        if not os.path.exists(self.migrations_dir):
            self.logger.warning(f"Migrations directory not found: {self.migrations_dir}")
            return migrations

        for filename in os.listdir(self.migrations_dir):
            if filename.endswith('.sql'):
                try:
                    version = int(filename.split('.')[0])
                    migrations.append((version, filename))
                except ValueError:
                    self.logger.warning(f"Invalid migration filename: {filename}")

        return sorted(migrations)


class BaseModel:
    """
    Base class for all table-backed models.

    Subclasses declare ``table`` and ``fields`` (every column except ``id``,
    in insert order). SELECT, INSERT, UPDATE and DELETE statements are
    generated from those two declarations; values are always bound as
    parameters.
    """

    table: str = ''
    fields: Tuple[str, ...] = ()

    def __init__(self, **attrs: Any):
        unknown = set(attrs) - set(self.columns())
        if unknown:
            raise TypeError(f"{type(self).__name__} has no column(s): {', '.join(sorted(unknown))}")

        self.id = attrs.get('id')
        for field in self.fields:
            setattr(self, field, attrs.get(field))

    @classmethod
    def columns(cls) -> Tuple[str, ...]:
        return ('id',) + tuple(cls.fields)

    @classmethod
    def from_row(cls, row) -> 'BaseModel':
        """Build an instance from a result row; columns the model doesn't know are ignored."""
        columns = cls.columns()
        return cls(**{key: row[key] for key in row.keys() if key in columns})

    @classmethod
    def _from_rows(cls, rows) -> List['BaseModel']:
        return [cls.from_row(row) for row in rows]

    # Query helpers

    @classmethod
    def _db(cls) -> DatabaseConnection:
        return get_shared_connection()

    @classmethod
    def _execute_query(cls, query: str, params: Tuple = ()) -> int:
        """Execute a query that modifies data (UPDATE, DELETE); returns the affected row count."""
        db = cls._db()
        db.db_logger.log_query(query, params)
        try:
            with db.get_connection() as conn:
                cursor = conn.execute(query, params)
                conn.commit()
                db.logger.debug(f"Query executed successfully, affected rows: {cursor.rowcount}")
                return cursor.rowcount
        except DatabaseError as e:
            db.db_logger.log_error("_execute_query", e)
            raise

    @classmethod
    def _execute_insert(cls, query: str, params: Tuple = ()) -> int:
        """Execute an INSERT; returns the id of the new row."""
        db = cls._db()
        db.db_logger.log_query(query, params)
        try:
            with db.get_connection() as conn:
                cursor = conn.execute(query, params)
                conn.commit()
                db.logger.debug(f"Insert executed successfully, new row ID: {cursor.lastrowid}")
                return cursor.lastrowid
        except DatabaseError as e:
            db.db_logger.log_error("_execute_insert", e)
            raise

    @classmethod
    def _fetch_one(cls, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        """Execute a query that returns a single result."""
        db = cls._db()
        db.db_logger.log_query(query, params)
        try:
            with db.get_connection() as conn:
                result = conn.execute(query, params).fetchone()
                db.logger.debug(f"Fetch one query executed, result: {'found' if result is not None else 'not found'}")
                return result
        except DatabaseError as e:
            db.db_logger.log_error("_fetch_one", e)
            raise

    @classmethod
    def _fetch_all(cls, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        """Execute a query that returns multiple results."""
        db = cls._db()
        db.db_logger.log_query(query, params)
        try:
            with db.get_connection() as conn:
                results = conn.execute(query, params).fetchall()
                db.logger.debug(f"Fetch all query executed, returned {len(results)} rows")
                return results
        except DatabaseError as e:
            db.db_logger.log_error("_fetch_all", e)
            raise

    @classmethod
    def _fetch_scalar(cls, query: str, params: Tuple = ()) -> Any:
        """Execute a query that returns a single value."""
        result = cls._fetch_one(query, params)
        if result is not None:
            return result[0]
        return None

    @classmethod
    def _where_clause(cls, options: Dict[str, Any]) -> Tuple[str, Tuple]:
        unknown = set(options) - set(cls.columns())
        if unknown:
            raise ValueError(f"Unknown column(s) for {cls.table}: {', '.join(sorted(unknown))}")

        clauses = []
        params = []
        for column, value in options.items():
            if value is None:
                clauses.append(f"{cls.table}.{column} IS NULL")
            else:
                clauses.append(f"{cls.table}.{column} = ?")
                params.append(value)
        return ' AND '.join(clauses), tuple(params)

    # Finders

    @classmethod
    def find_by_id(cls, id: Any) -> Optional['BaseModel']:
        """Get a record by its primary key."""
        query = f"SELECT * FROM {cls.table} WHERE {cls.table}.id = ?"
        row = cls._fetch_one(query, (id,))
        return cls.from_row(row) if row is not None else None

    @classmethod
    def all(cls) -> List['BaseModel']:
        """Get all records."""
        query = f"SELECT * FROM {cls.table} ORDER BY {cls.table}.id"
        return cls._from_rows(cls._fetch_all(query))

    @classmethod
    def where(cls, **options: Any) -> List['BaseModel']:
        """Get every record whose columns equal the given values."""
        if not options:
            return cls.all()

        where_str, params = cls._where_clause(options)
        query = f"SELECT * FROM {cls.table} WHERE {where_str} ORDER BY {cls.table}.id"
        return cls._from_rows(cls._fetch_all(query, params))

    @classmethod
    def find_by(cls, **options: Any) -> Optional['BaseModel']:
        """Get the first record whose columns equal the given values; with none, the first record."""
        if not options:
            query = f"SELECT * FROM {cls.table} ORDER BY {cls.table}.id LIMIT 1"
            row = cls._fetch_one(query)
            return cls.from_row(row) if row is not None else None

        where_str, params = cls._where_clause(options)
        query = f"SELECT * FROM {cls.table} WHERE {where_str} ORDER BY {cls.table}.id LIMIT 1"
        row = cls._fetch_one(query, params)
        return cls.from_row(row) if row is not None else None

    @classmethod
    def count(cls) -> int:
        """Get the total count of records."""
        query = f"SELECT COUNT(*) FROM {cls.table}"
        return cls._fetch_scalar(query) or 0

    # Persistence

    def save(self) -> 'BaseModel':
        """Insert the record if it is new, otherwise update its row."""
        if self.id is None:
            return self.create()
        return self.update()

    def create(self) -> 'BaseModel':
        """Insert a new record and take the id the database assigned."""
        if self.id is not None:
            raise RecordAlreadyPersistedError(f"{type(self).__name__} {self.id} already in database")

        insert_str = ', '.join(self.fields)
        values_str = ', '.join('?' for _ in self.fields)
        query = f"INSERT INTO {self.table} ({insert_str}) VALUES ({values_str})"
        self.id = self._execute_insert(query, self._field_values())
        return self

    def update(self) -> 'BaseModel':
        """Write every field back to the row with this record's id."""
        if self.id is None:
            raise RecordNotPersistedError(f"{type(self).__name__} not in database")

        set_str = ', '.join(f"{field} = ?" for field in self.fields)
        query = f"UPDATE {self.table} SET {set_str} WHERE id = ?"
        affected = self._execute_query(query, self._field_values() + (self.id,))
        if affected == 0:
            raise RecordNotFoundError(f"{type(self).__name__} with ID {self.id} not found")
        return self

    def delete(self) -> bool:
        """Delete this record's row and forget its id."""
        if self.id is None:
            raise RecordNotPersistedError(f"{type(self).__name__} not in database")

        query = f"DELETE FROM {self.table} WHERE id = ?"
        affected = self._execute_query(query, (self.id,))
        self.id = None
        return affected > 0

    def _field_values(self) -> Tuple:
        return tuple(getattr(self, field) for field in self.fields)

    def to_dict(self) -> Dict[str, Any]:
        return {column: getattr(self, column) for column in self.columns()}

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        attrs = ', '.join(f"{column}={getattr(self, column)!r}" for column in self.columns())
        return f"{type(self).__name__}({attrs})"
