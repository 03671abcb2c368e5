# customerbook/logging_config.py
import logging

from customerbook.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Simple logging setup:

    - Reset any existing handlers on the root logger.
    - Attach a StreamHandler so logs show in uvicorn's console.
    - Also attach a FileHandler when LOG_FILE is set (default logs/customerbook.log).
    - Use LOG_LEVEL from settings (default INFO).
    """
    settings = settings or get_settings()

    level_name = getattr(settings, "log_level", "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)

    root_logger = logging.getLogger()

    # Remove any handlers uvicorn or previous config attached
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
        h.close()

    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    )

    # Console handler (stderr)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = settings.resolved_log_file()
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # SQL echo goes through the engine logger, keep it at INFO when requested
    if settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    root_logger.debug("Logging configured (level=%s, file=%s)", level_name, log_file)
