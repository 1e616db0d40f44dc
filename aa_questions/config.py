"""
Configuration for aa_questions, read from the environment.

Values may also come from a ``.env`` file in the working directory.
"""

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv


DEFAULT_DATABASE = 'questions.db'
TRUE_VALUES = ('1', 'true', 'yes', 'on')


def load_environment(env_file: Optional[str] = None) -> None:
    """Load variables from a .env file without overriding the real environment."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()


def get_conn_params() -> Dict[str, Any]:
    """Build the connection parameters for Database from DB_* variables."""
    timeout = os.getenv('DB_TIMEOUT', '5.0')
    try:
        timeout = float(timeout)
    except ValueError as e:
        raise ValueError(f'DB_TIMEOUT must be a number of seconds, got {timeout!r}') from e

    return {
        'database': os.getenv('DB_DATABASE', DEFAULT_DATABASE),
        'timeout': timeout
    }


def auto_migrate_enabled() -> bool:
    return os.getenv('DB_AUTO_MIGRATE', 'true').strip().lower() in TRUE_VALUES
