import logging
import logging.handlers
import os
from pathlib import Path


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 10_000_000  # 10MB


def _rotating_handler(path: Path, level: int, name: str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.set_name(name)
    handler.setLevel(level)
    return handler


def setup_logging(app_name: str = "weekly-tracker") -> None:
    """Configure logging for the tracker jobs

    Args:
        app_name: Name used for the log files and handler names

    Reads LOG_DIR (default /data/logs) and LOG_LEVEL (default INFO).
    Calling it again replaces the handlers it installed before.

    """
    log_dir = Path(os.getenv("LOG_DIR", "/data/logs"))
    os.makedirs(log_dir, exist_ok=True)

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown LOG_LEVEL: {level_name}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        if handler.get_name() and handler.get_name().startswith(f"{app_name}-"):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.set_name(f"{app_name}-console")
    console_handler.setLevel(level)

    handlers = [
        console_handler,
        _rotating_handler(log_dir / f"{app_name}.log", level, f"{app_name}-file"),
        # Errors also go to their own file for the weekly job alerts
        _rotating_handler(log_dir / f"{app_name}-error.log", logging.ERROR, f"{app_name}-errors"),
    ]

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
