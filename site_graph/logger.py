# File: site_graph/logger.py
"""Логирование SiteGraph: один именованный логгер ``SiteGraph`` и его дочерние логгеры.

Сообщения пишутся в stderr (stdout занят JSON-отчётом CLI) и, по желанию,
в файл с ротацией.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
ROOT_NAME: Final[str] = "SiteGraph"
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3


def _handlers(fmt: str, log_file: Optional[Union[str, Path]]) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file), maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = LOG_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Настраивает логгер ``SiteGraph``; с ``replace_handlers=False`` обработчики добавляются к старым."""
    root = logging.getLogger(ROOT_NAME)
    root.setLevel(level)
    if replace_handlers:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
    for handler in _handlers(log_format, log_file):
        root.addHandler(handler)
    root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """``SiteGraph`` или его потомок ``SiteGraph.<name>``."""
    return logging.getLogger(f"{ROOT_NAME}.{name}" if name else ROOT_NAME)


logger: logging.Logger = configure(level="WARNING")

__all__ = ["logger", "configure", "get_logger"]
