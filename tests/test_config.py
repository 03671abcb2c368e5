import logging

from customerbook.config import Settings
from customerbook.logging_config import configure_logging


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://u:p@db:5432/customers")
    monkeypatch.setenv("RECENT_LIMIT", "25")
    monkeypatch.setenv("CREATE_TABLES", "true")
    s = Settings()
    assert s.database_url == "postgresql+psycopg://u:p@db:5432/customers"
    assert s.recent_limit == 25
    assert s.create_tables is True
    assert s.is_sqlite is False


def test_blank_log_file_disables_file_logging(monkeypatch):
    monkeypatch.setenv("LOG_FILE", "")
    assert Settings().resolved_log_file() is None


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    configure_logging(Settings(log_file=log_file, log_level="DEBUG"))
    logging.getLogger("customerbook.test").info("hello from the test")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "hello from the test" in log_file.read_text(encoding="utf-8")
    assert logging.getLogger().level == logging.DEBUG
    # leave a console-only setup behind for later tests
    configure_logging(Settings(log_file=None, log_level="WARNING"))
