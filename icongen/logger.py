"""
Logging utility for icon-gen.

This module provides centralized logging functionality that:
- Prints progress to the console at the configured level
- Optionally writes a timestamped log file and archives older ones
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path


class LogSetup:
    """Sets up logging for the application with console and optional file handlers."""

    def __init__(self, level="INFO", log_dir=None):
        """
        Initialize logging setup.

        Args:
            level: Console log level name (default: INFO)
            log_dir: Directory for run logs; file logging is off when None
        """
        self.level = logging.getLevelName(str(level).upper())
        if not isinstance(self.level, int):
            self.level = logging.INFO
        self.log_dir = Path(log_dir) if log_dir else None
        self.archive_dir = self.log_dir / "archive" if self.log_dir else None

    def setup_logging(self):
        """
        Configure the root logger.

        Returns:
            tuple: (logger, log_filepath or None)
        """
        logger = logging.getLogger()
        logger.setLevel(logging.DEBUG)

        # Remove any existing handlers to avoid duplicates
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        log_filepath = None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.archive_dir.mkdir(parents=True, exist_ok=True)
            self._archive_existing_logs()

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_filepath = self.log_dir / f"run_{timestamp}.log"
            file_handler = logging.FileHandler(log_filepath, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        # PIL logs every PNG chunk at DEBUG
        logging.getLogger("PIL").setLevel(logging.WARNING)

        return logger, log_filepath

    def _archive_existing_logs(self):
        """
        Move old run logs into the archive directory.
        """
        for log_file in self.log_dir.glob("run_*.log"):
            if log_file.is_file():
                try:
                    shutil.move(str(log_file), str(self.archive_dir / log_file.name))
                except OSError as e:
                    logging.getLogger(__name__).warning("Could not archive log file %s: %s", log_file.name, e)


def setup_logging(level="INFO", log_dir=None):
    """
    Convenience function to set up logging.

    Returns:
        tuple: (logger, log_filepath)
    """
    return LogSetup(level, log_dir).setup_logging()
