"""
Configuración de logging compartida por la API y los scripts.

- Consola: nivel configurable (CASHAPP_LOG_LEVEL)
- Archivo: rotación diaria en CASHAPP_LOG_DIR (si está definido)
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from app import config

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 14  # Dos semanas de archivos

# Loggers ruidosos (se bajan a WARNING)
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "multipart",
    "httpx",
    "httpcore",
]


def setup_logging(process_name: str = "cashapp", level: str | None = None, log_dir: str | None = None) -> logging.Logger:
    """
    Inicializa el logger raíz con consola y archivo diario.

    Se puede llamar varias veces: los handlers previos se reemplazan.
    """
    level_name = (level or config.LOG_LEVEL).upper()
    log_dir = config.LOG_DIR if log_dir is None else log_dir

    root_logger = logging.getLogger()
    root_logger.setLevel(level_name)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=path / f"{process_name}.log",
            when="midnight",
            interval=1,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info("Logging inicializado: %s (%s)", process_name, level_name)
    return root_logger
