"""
Centralized logging setup and function decorator for the ingest pipeline.

Every module logs through a named logger ("ingest", "feed_reader",
"video_download", ...) that writes to a file under logs/. Console output is
only added in verbose mode; operator-facing progress is printed directly.

Usage:
    from src.logger import setup_logging, log_function

    logger = setup_logging(
        logger_name="ingest",
        log_file="logs/ingest.log",
        verbose=True,
    )

    @log_function(logger_name="ingest", log_args=True)
    def acquire(entry):
        ...
"""

import functools
import logging
import time
from pathlib import Path
from typing import Optional, Callable, Any


DEFAULT_LOG_FILE = "logs/ingest.log"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    logger_name: str,
    log_file: str = DEFAULT_LOG_FILE,
    verbose: bool = False,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Configure a named logger with a file handler and an optional console handler.

    Calling it again for an already configured logger returns the logger
    unchanged, except that a console handler is added when ``verbose`` is
    requested and none exists yet.

    Args:
        logger_name: Logger name (e.g. "ingest", "video_download")
        log_file: Path of the log file, parent directories are created
        verbose: Also log DEBUG and above to the console
        level: Level used for the file handler

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(logging.DEBUG if verbose else level)

        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    has_console = any(
        type(handler) is logging.StreamHandler for handler in logger.handlers
    )
    if verbose and not has_console:
        logger.setLevel(logging.DEBUG)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("DEBUG: %(message)s"))
        logger.addHandler(console_handler)

    return logger


def log_function(
    logger_name: Optional[str] = None,
    level: int = logging.INFO,
    log_args: bool = False,
    log_result: bool = False,
    log_execution_time: bool = True,
) -> Callable:
    """
    Decorator logging entry, exit, duration and exceptions of a function.

    Exceptions are logged with their traceback and re-raised untouched, so
    the decorator never changes how a caller handles errors.

    Args:
        logger_name: Logger to use (defaults to the function's module name)
        level: Level of the entry/exit messages
        log_args: Include positional and keyword arguments in the entry message
        log_result: Include the return value in the exit message
        log_execution_time: Include the duration in the exit message

    Example:
        @log_function(logger_name="indexing", log_args=True)
        def index_and_wait(handle, provenance):
            ...
    """

    def decorator(func: Callable) -> Callable:
        name = logger_name or func.__module__

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = logging.getLogger(name)
            if not logger.handlers:
                logger = setup_logging(name, level=level)

            message = f"Calling {func.__name__}"
            if log_args and (args or kwargs):
                rendered = [repr(a) for a in args]
                rendered += [f"{k}={v!r}" for k, v in kwargs.items()]
                message += f" with args: {', '.join(rendered)}"
            logger.log(level, message)

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                elapsed = time.time() - start_time
                logger.error(
                    f"Exception in {func.__name__} after {elapsed:.2f}s: "
                    f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

            completion = f"Completed {func.__name__}"
            if log_execution_time:
                completion += f" in {time.time() - start_time:.2f}s"
            if log_result:
                completion += f" with result: {result!r}"
            logger.log(level, completion)
            return result

        return wrapper

    return decorator
