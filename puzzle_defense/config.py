"""
Configuration and utility functions for Puzzle Defense.

This module provides:
- Logging setup with automatic file rotation
- Logger accessors for the application and for map generation
- Performance timing for generation phases
- Project root path discovery

The configuration system is designed to be imported early and provide
foundational utilities used throughout the application. Map generation
parameters live in puzzle_defense.game.data.maps.config.
"""

import os
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
import shutil

# ============================================================================
# CONFIGURATION CONSTANTS
# ============================================================================

APP_LOGGER_NAME = 'PuzzleDefense'
MAP_LOGGER_NAME = APP_LOGGER_NAME + '.MapGeneration'

LOG_FORMAT = '[%(asctime)s] - [%(name)s] - [%(levelname)s] - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Logs older than this are moved to old_log_dump/
LOG_ARCHIVE_AGE = timedelta(days=1)


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

def setup_logging(project_root, level=logging.DEBUG):
    """
    Configure comprehensive logging with automatic file management.

    Creates two directories:
    - log_dump/: Current logs (files less than 1 day old)
    - old_log_dump/: Archived logs (files older than 1 day)

    Log files are named: session_YYYYMMDD_HHMMSS.log

    Args:
        project_root (Path): Path to the project root directory
        level (int): Root logging level

    Returns:
        logging.Logger: Configured logger instance for the application
    """
    log_dir = Path(project_root) / "log_dump"
    old_log_dir = Path(project_root) / "old_log_dump"

    log_dir.mkdir(exist_ok=True)
    old_log_dir.mkdir(exist_ok=True)

    # Archive old log files before starting new session
    _archive_old_logs(log_dir, old_log_dir)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_path = log_dir / f"session_{timestamp}.log"

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.FileHandler(log_path, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.info(f"Logging initialized. Log file: {log_path}")

    return logger


def _archive_old_logs(log_dir, archive_dir):
    """
    Move log files older than LOG_ARCHIVE_AGE to the archive directory.

    Args:
        log_dir (Path): Directory containing current logs
        archive_dir (Path): Directory for archived logs

    Returns:
        int: Number of archived files
    """
    cutoff_time = datetime.now() - LOG_ARCHIVE_AGE
    archived = 0

    for log_file in log_dir.glob("*.log"):
        file_mtime = datetime.fromtimestamp(log_file.stat().st_mtime)

        if file_mtime < cutoff_time:
            dest = archive_dir / log_file.name
            shutil.move(str(log_file), str(dest))
            # logging is not configured yet at this point
            print(f"Archived old log: {log_file.name}")
            archived += 1

    return archived


def get_logger(name=None):
    """
    Get a logger instance for a specific module.

    This should be called at the top of each module:
        logger = get_logger(__name__)

    Args:
        name (str, optional): Logger name, typically __name__

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name or APP_LOGGER_NAME)


def get_map_logger():
    """
    Get a specialized logger for map generation.

    Keeps puzzle assembly chatter separate from general application logs so
    it can be filtered independently.

    Returns:
        logging.Logger: Map generation logger instance
    """
    return logging.getLogger(MAP_LOGGER_NAME)


class PerformanceTimer:
    """
    Context manager for timing and logging operation duration.

    Usage:
        with PerformanceTimer(logger, "Operation name"):
            # ... code to time ...

    Attributes:
        logger: Logger instance to use for output
        operation_name: Name of the operation being timed
        start_time: Time when context was entered
        elapsed: Duration in seconds, set on exit
    """

    def __init__(self, logger, operation_name):
        self.logger = logger
        self.operation_name = operation_name
        self.start_time = None
        self.elapsed = None

    def __enter__(self):
        import time
        self.start_time = time.time()
        self.logger.debug(f"Starting: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        import time
        self.elapsed = time.time() - self.start_time
        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name} in {self.elapsed:.3f}s")
        else:
            self.logger.warning(f"Failed: {self.operation_name} after {self.elapsed:.3f}s ({exc_type.__name__})")
        return False


# ============================================================================
# PROJECT ROOT DISCOVERY
# ============================================================================

_CACHED_PROJECT_ROOT = None  # Module-level cache


def get_project_root(marker="puzzle_defense"):
    """
    Automatically find the project root directory.

    Searches upward from the current file location until it finds a directory
    containing the marker folder. The result is cached for subsequent calls.

    Args:
        marker (str): Directory name to search for (default: "puzzle_defense")

    Returns:
        str: Absolute path to project root directory

    Raises:
        FileNotFoundError: If project root cannot be found
    """
    global _CACHED_PROJECT_ROOT

    logger = get_logger(__name__)

    if _CACHED_PROJECT_ROOT:
        logger.debug(f"Using cached project root: {_CACHED_PROJECT_ROOT}")
        return _CACHED_PROJECT_ROOT

    current_dir = os.path.abspath(os.path.dirname(__file__))
    logger.debug(f"Searching for project root from: {current_dir}")

    while True:
        marker_path = os.path.join(current_dir, marker)

        if os.path.exists(marker_path):
            _CACHED_PROJECT_ROOT = current_dir
            logger.info(f"Project root found: {_CACHED_PROJECT_ROOT}")
            return _CACHED_PROJECT_ROOT

        parent_dir = os.path.dirname(current_dir)

        # Reached filesystem root
        if parent_dir == current_dir:
            logger.error(f"Project root not found (searched for '{marker}' directory)")
            raise FileNotFoundError(
                f"Could not find project root containing '{marker}' directory"
            )

        current_dir = parent_dir
