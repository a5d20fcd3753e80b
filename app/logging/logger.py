import logging
import sys
import threading
from collections.abc import Generator
from contextlib import contextmanager

_NO_JOB = "-"


class _JobContextFilter(logging.Filter):
    """Stamps each record with the job ID bound to the emitting thread."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job_id = Log.current_job_id()
        return True


class Log:
    """Centralized logging with structured format.

    Queue consumers bind the running job with `job_context` so every line
    they emit carries its job ID.
    """

    _logger: logging.Logger = logging.getLogger("rewrites")
    _context = threading.local()
    _logger.addFilter(_JobContextFilter())

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(threadName)s job=%(job_id)s %(message)s"
                )
            )
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def job_context(cls, job_id: str) -> Generator[None, None, None]:
        previous = cls.current_job_id()
        cls._context.job_id = job_id
        try:
            yield
        finally:
            cls._context.job_id = previous

    @classmethod
    def current_job_id(cls) -> str:
        return getattr(cls._context, "job_id", _NO_JOB)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log an error message with the active exception traceback."""
        cls._logger.exception(message, extra=kwargs)
