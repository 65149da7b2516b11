import logging

import pytest
from pydantic import ValidationError

from medslot.config import DEFAULT_DB_PATH, Settings
from medslot.logger import configure_logging


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "MEDSLOT_STORAGE",
        "MEDSLOT_DB_PATH",
        "MEDSLOT_DB_TIMEOUT",
        "MEDSLOT_LOCK_TIMEOUT",
        "MEDSLOT_SEED_DEMO",
        "LOG_LEVEL",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.storage == "sqlite"
    assert settings.db_path == DEFAULT_DB_PATH
    assert settings.db_timeout == 5.0
    assert settings.seed_demo is False
    assert settings.log_file is None


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("MEDSLOT_STORAGE", "memory")
    monkeypatch.setenv("MEDSLOT_DB_TIMEOUT", "1.5")
    monkeypatch.setenv("MEDSLOT_SEED_DEMO", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.storage == "memory"
    assert settings.db_timeout == 1.5
    assert settings.seed_demo is True
    assert settings.log_level == "DEBUG"


def test_reads_dotenv_file(monkeypatch, tmp_path):
    # registered with monkeypatch so the value loaded from .env is removed afterwards
    monkeypatch.setenv("MEDSLOT_LOCK_TIMEOUT", "")
    monkeypatch.delenv("MEDSLOT_LOCK_TIMEOUT")
    (tmp_path / ".env").write_text("MEDSLOT_LOCK_TIMEOUT=3\n", encoding="utf-8")
    assert Settings.from_env().lock_timeout == 3.0


@pytest.mark.parametrize(
    "name,value",
    [("MEDSLOT_STORAGE", "mongo"), ("MEDSLOT_DB_TIMEOUT", "0"), ("LOG_LEVEL", "chatty")],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings.from_env()


def test_configure_logging_does_not_stack_handlers(tmp_path):
    log_file = tmp_path / "logs" / "medslot.log"
    configure_logging("INFO", str(log_file))
    logger = configure_logging("INFO", str(log_file))
    assert len(logger.handlers) == 2
    logging.getLogger("medslot.test").info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")
