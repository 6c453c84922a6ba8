from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class LoggingSettings(BaseModel):
    """
    Root logger settings.

    When `path` is set, a file handler with daily rotation is added next to the
    console handler.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = "INFO"
    path: Optional[str] = None
    backup_count: int = 5


def init_logging(settings: LoggingSettings) -> None:
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.level}")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.path:
        log_path = Path(settings.path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                log_path,
                when="midnight",
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(level=level, format=_FORMAT, handlers=handlers, force=True)
