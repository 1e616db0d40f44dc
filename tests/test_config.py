"""Test cases for environment configuration."""

import pytest

from aa_questions.config import DEFAULT_DATABASE, auto_migrate_enabled, get_conn_params, load_environment


class TestGetConnParams:
    """Test building connection parameters from DB_* variables."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('DB_DATABASE', raising=False)
        monkeypatch.delenv('DB_TIMEOUT', raising=False)

        assert get_conn_params() == {'database': DEFAULT_DATABASE, 'timeout': 5.0}

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv('DB_DATABASE', '/var/lib/forum/questions.db')
        monkeypatch.setenv('DB_TIMEOUT', '2.5')

        assert get_conn_params() == {'database': '/var/lib/forum/questions.db', 'timeout': 2.5}

    def test_bad_timeout_raises(self, monkeypatch):
        monkeypatch.setenv('DB_TIMEOUT', 'soon')

        with pytest.raises(ValueError, match='DB_TIMEOUT') as exc_info:
            get_conn_params()

        assert isinstance(exc_info.value.__cause__, ValueError)


class TestAutoMigrate:
    """Test the DB_AUTO_MIGRATE switch."""

    @pytest.mark.parametrize('value, expected', [
        ('true', True), ('1', True), ('YES', True), ('false', False), ('0', False), ('', False),
    ])
    def test_values(self, monkeypatch, value, expected):
        monkeypatch.setenv('DB_AUTO_MIGRATE', value)

        assert auto_migrate_enabled() is expected

    def test_default_is_enabled(self, monkeypatch):
        monkeypatch.delenv('DB_AUTO_MIGRATE', raising=False)

        assert auto_migrate_enabled() is True


class TestLoadEnvironment:
    """Test loading a .env file."""

    def test_env_file_values_are_loaded(self, monkeypatch, tmp_path):
        # setenv first so monkeypatch removes whatever the .env file sets
        monkeypatch.setenv('DB_DATABASE', 'placeholder.db')
        monkeypatch.delenv('DB_DATABASE')
        env_file = tmp_path / '.env'
        env_file.write_text('DB_DATABASE=from_env_file.db\n')

        load_environment(str(env_file))

        assert get_conn_params()['database'] == 'from_env_file.db'

    def test_real_environment_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv('DB_DATABASE', 'real.db')
        env_file = tmp_path / '.env'
        env_file.write_text('DB_DATABASE=from_env_file.db\n')

        load_environment(str(env_file))

        assert get_conn_params()['database'] == 'real.db'
