"""
Database Module for aa_questions - Main Database Class
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Main database interface: opens the shared connection the models use.
"""

from typing import Dict, Any, Optional
from .base import (
    DatabaseConnection, DatabaseError, MigrationManager,
    clear_shared_connection, set_shared_connection
)
from .models import User, Question, Reply, QuestionFollow, QuestionLike


class Database:
    """
    Main database interface for aa_questions.

    Opens the connection, brings the schema up to date and registers the
    connection so every model class can reach it.

    Example:
        db = Database({'database': 'questions.db'})

        user = User.find_by_name('Ada', 'Lovelace')
        questions = user.authored_questions()
    """

    models = (User, Question, Reply, QuestionFollow, QuestionLike)

    def __init__(self, conn_params: Dict[str, Any], auto_migrate: bool = True,
                 migrations_dir: Optional[str] = None):
        """
        Initialize the database connection.

        Args:
            conn_params: Database connection parameters
            auto_migrate: Whether to automatically run migrations on startup
            migrations_dir: Directory of versioned .sql files, defaults to the bundled schema
        """
        self.connection = DatabaseConnection(conn_params)

        if migrations_dir:
            self.migrations = MigrationManager(self.connection, migrations_dir)
        else:
            self.migrations = MigrationManager(self.connection)

        if auto_migrate and not self.migrations.run_migrations():
            self.connection.close()
            raise DatabaseError("Schema migrations failed")

        set_shared_connection(self.connection)

    def health_check(self) -> bool:
        """Check if database connection is healthy."""
        return self.connection.health_check()

    def get_stats(self) -> Dict[str, int]:
        """Get row counts per table."""
        return {model.table: model.count() for model in self.models}

    def close(self) -> None:
        """Close the connection and stop sharing it with the models."""
        clear_shared_connection(self.connection)
        self.connection.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
