# src/constraint_validations/tests/test_logging/test_log_builder.py
import logging
from types import SimpleNamespace

from constraint_validations.core.logging.builder import make_dict_config, setup_logging
from constraint_validations.core.logging.filters import WriteTargetFilter

def make_test_settings(**overrides):
    # Build a lightweight settings object for tests (duck-typed)
    s = SimpleNamespace(
        ENV="development",
        LOG_LEVEL="INFO",
        LOG_FORMAT="json",
        LOG_TO_STDOUT=False,
        LOG_DIR=None,
        LOG_MAX_BYTES=1000,
        LOG_BACKUP_COUNT=1,
        ENABLE_SQL_LOGGING=False,
    )
    for key, value in overrides.items():
        setattr(s, key, value)
    return s

def test_make_dict_config_with_log_dir(tmp_path):
    cfg = make_dict_config(make_test_settings(LOG_DIR=tmp_path))
    assert set(cfg["handlers"]) == {"console", "file", "error_file"}
    assert cfg["handlers"]["file"]["filename"].endswith("constraint-validations.log")
    assert "json" in cfg["formatters"]
    assert set(cfg["filters"]) == {"write_target", "redact"}

def test_make_dict_config_stdout_only():
    cfg = make_dict_config(make_test_settings(LOG_TO_STDOUT=True))
    assert set(cfg["handlers"]) == {"console", "error_console"}

def test_sql_logging_is_opt_in():
    cfg = make_dict_config(make_test_settings(LOG_TO_STDOUT=True))
    assert cfg["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
    cfg = make_dict_config(make_test_settings(LOG_TO_STDOUT=True, ENABLE_SQL_LOGGING=True))
    assert cfg["loggers"]["sqlalchemy.engine"]["level"] == "DEBUG"

def test_setup_logging_creates_log_dir(tmp_path):
    settings = make_test_settings(LOG_DIR=tmp_path / "logs")
    assert not settings.LOG_DIR.exists()
    setup_logging(settings)
    assert settings.LOG_DIR.exists()
    root = logging.getLogger()
    assert root.handlers
    assert any(isinstance(f, WriteTargetFilter) for f in root.filters)
