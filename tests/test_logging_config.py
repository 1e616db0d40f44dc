"""Test cases for the centralized logging configuration."""

import logging
import logging.handlers
import os

from aa_questions.logging_config import ColoredFormatter, Colors, DatabaseLogger, ForumLogger, get_logger


class TestForumLogger:
    """Test the logging singleton."""

    def test_is_singleton(self):
        assert ForumLogger() is ForumLogger()

    def test_root_logger_writes_to_log_dir(self):
        log_dir = os.path.abspath(ForumLogger().logs_dir)
        file_handlers = [
            handler for handler in logging.getLogger().handlers
            if isinstance(handler, logging.handlers.RotatingFileHandler)
        ]

        assert any(handler.baseFilename == os.path.join(log_dir, 'aa_questions.log') for handler in file_handlers)

    def test_get_logger_is_cached(self):
        assert get_logger('aa_questions.tests.cached') is get_logger('aa_questions.tests.cached')

    def test_get_logger_with_own_file(self):
        logger = get_logger('aa_questions.tests.own_file', 'own_file.log')

        assert [os.path.basename(handler.baseFilename) for handler in logger.handlers] == ['own_file.log']


class TestDatabaseLogger:
    """Test the database operation logger."""

    def test_logs_queries_with_params(self):
        db_logger = DatabaseLogger()
        handler = logging.handlers.BufferingHandler(10)
        db_logger.logger.addHandler(handler)
        try:
            db_logger.log_query("SELECT * FROM users WHERE id = ?", (1,))
            db_logger.log_query("SELECT 1")
        finally:
            db_logger.logger.removeHandler(handler)

        messages = [record.getMessage() for record in handler.buffer]
        assert messages == [
            "SQL Query: SELECT * FROM users WHERE id = ? | Params: (1,)",
            "SQL Query: SELECT 1",
        ]

    def test_logger_name(self):
        assert DatabaseLogger().logger.name == 'aa_questions.database'


class TestColoredFormatter:
    """Test console colouring."""

    def test_level_is_coloured(self):
        formatter = ColoredFormatter('[%(asctime)s] %(levelname)-8s %(name)-20s: %(message)s')
        record = logging.LogRecord('aa_questions.main', logging.ERROR, __file__, 1, 'boom', None, None)

        output = formatter.format(record)

        assert Colors.BRIGHT_RED in output
        assert output.endswith(' boom')
