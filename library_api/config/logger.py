import os
from typing import Optional

from library_api.config.settings import Settings
from library_api.shared.logger import JohnWickLogger

settings = Settings()

# Ensure the log directory exists
log_dir = os.path.dirname(settings.app.log_file)
if log_dir and not os.path.exists(log_dir):
    os.makedirs(log_dir, exist_ok=True)


def get_logger(name: Optional[str] = None) -> JohnWickLogger:
    """
    Return the JohnWickLogger registered under ``name``.
    Falls back to the application name; file and level come from settings.
    """
    return JohnWickLogger(
        name=name or settings.app.app_name,
        log_file=settings.app.log_file,
        level=settings.app.log_level,
    )


__all__ = ["get_logger", "JohnWickLogger"]
