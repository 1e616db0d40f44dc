"""
Database Module for aa_questions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

A small object-relational mapping layer over SQLite for a
question-and-answer forum.
"""

__title__ = 'aa_questions database'
__version__ = '0.3.0'

from .database import Database
from .base import (
    BaseModel, DatabaseConnection, MigrationManager,
    DatabaseError, ConstraintViolationError, RecordAlreadyPersistedError,
    RecordNotPersistedError, RecordNotFoundError,
    get_shared_connection, set_shared_connection, clear_shared_connection
)
from .models import User, Question, Reply, QuestionFollow, QuestionLike

__all__ = [
    'Database',
    'BaseModel',
    'DatabaseConnection',
    'MigrationManager',
    'DatabaseError',
    'ConstraintViolationError',
    'RecordAlreadyPersistedError',
    'RecordNotPersistedError',
    'RecordNotFoundError',
    'get_shared_connection',
    'set_shared_connection',
    'clear_shared_connection',
    'User',
    'Question',
    'Reply',
    'QuestionFollow',
    'QuestionLike'
]
