"""
Open the configured forum database, apply migrations and report on it.

    python -m aa_questions
"""

import sys

from aa_questions import __version__
from aa_questions.config import auto_migrate_enabled, get_conn_params, load_environment
from aa_questions.database import Database, DatabaseError
from aa_questions.logging_config import get_logger


VERSION = __version__


def main() -> int:
    load_environment()
    logger = get_logger('aa_questions.main')
    logger.info(f'Starting aa_questions v{VERSION}...')

    try:
        conn_params = get_conn_params()
        with Database(conn_params, auto_migrate=auto_migrate_enabled()) as db:
            if not db.health_check():
                logger.error('Database health check failed')
                return 1

            logger.info(f"Database {conn_params['database']} is healthy")
            for table, count in db.get_stats().items():
                logger.info(f'  {table}: {count} records')
    except DatabaseError as e:
        logger.error(f'Database error: {e}')
        return 1
    except (KeyError, ValueError) as e:
        logger.error(f'Configuration error: {e}')
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
