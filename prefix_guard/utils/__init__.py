"""
Utility functions and helpers.

This module contains shared utilities used across PrefixGuard components.

Components:
    - setup_logging: Logging configuration for the CLI and scripts
    - measure_time: Wall-clock timing context manager

Example:
    ```python
    from prefix_guard.utils import setup_logging, measure_time

    # Configure logging
    setup_logging(level="INFO", log_file="prefix_guard.log")

    # Measure execution time
    with measure_time() as timer:
        # ... do work ...
        pass
    print(f"Took {timer.elapsed_ms}ms")
    ```
"""

import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    level: Union[int, str] = "WARNING",
    log_file: Optional[Union[str, Path]] = None
) -> None:
    """
    Configure the ``prefix_guard`` logger hierarchy.

    Args:
        level: Logging level name or number
        log_file: Optional file to write logs to in addition to stderr
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logger = logging.getLogger("prefix_guard")
    logger.setLevel(level)

    # Replace handlers so repeated calls don't duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)


class Timer:
    """Elapsed-time holder filled in by measure_time."""

    def __init__(self):
        self.start = 0.0
        self.end: Optional[float] = None

    @property
    def elapsed_ms(self) -> float:
        end = self.end if self.end is not None else time.perf_counter()
        return (end - self.start) * 1000


@contextmanager
def measure_time() -> Iterator[Timer]:
    timer = Timer()
    timer.start = time.perf_counter()
    try:
        yield timer
    finally:
        timer.end = time.perf_counter()


__all__ = ["setup_logging", "measure_time", "Timer"]
