import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar

NOISY_HTTP_LOGGERS = (
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def normalize_log_level(raw_level: str | None) -> str:
    """Return an upper-case level name, falling back to INFO.

    Only the first word is considered so values like ``"DEBUG # verbose"``
    copied from a commented .env file still work.
    """
    if not raw_level or not raw_level.split():
        return "INFO"
    level = raw_level.split()[0].upper()
    if level not in VALID_LOG_LEVELS:
        return "INFO"
    return level


def set_noisy_http_logger_levels(current_log_level: str) -> None:
    """Ensure HTTP client noise only surfaces at DEBUG level."""

    noisy_level = logging.DEBUG if current_log_level == "DEBUG" else logging.WARNING
    for logger_name in NOISY_HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


class ConversationLogger:
    """Logger with correlation ID support"""

    @staticmethod
    def get_logger() -> logging.Logger:
        return logging.getLogger("conversation")

    @staticmethod
    def current_correlation_id() -> str | None:
        return _correlation_id.get()

    @staticmethod
    @contextmanager
    def correlation_context(request_id: str) -> Generator[None, None, None]:
        """Tag every record created inside the block with ``request_id``.

        The id lives in a context variable, so concurrent requests on the same
        event loop each see only their own.
        """
        token = _correlation_id.set(request_id)
        try:
            yield
        finally:
            _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Copy the active correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = _correlation_id.get()
        if request_id is not None and not hasattr(record, "correlation_id"):
            record.correlation_id = request_id
        return True


class CorrelationFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, "correlation_id"):
            record.msg = f"[{record.correlation_id[:8]}] {record.msg}"
        return super().format(record)


class HttpRequestLogDowngradeFilter(logging.Filter):
    """Downgrade noisy third-party HTTP logs to DEBUG."""

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self.prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.INFO:
            for prefix in self.prefixes:
                if record.name.startswith(prefix):
                    record.levelno = logging.DEBUG
                    record.levelname = logging.getLevelName(logging.DEBUG)
                    break
        return True


def configure_root_logging(log_level: str | None = None) -> str:
    """Install the proxy's handler on the root logger.

    Returns the effective level name.
    """
    level = normalize_log_level(log_level)

    handler = logging.StreamHandler()
    handler.addFilter(HttpRequestLogDowngradeFilter(*NOISY_HTTP_LOGGERS))
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        CorrelationFormatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level))

    # Configure uvicorn to be quieter
    for uvicorn_logger in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(uvicorn_logger).setLevel(logging.WARNING)

    set_noisy_http_logger_levels(level)
    logging.getLogger(__name__).debug("Logging configured at %s", level)
    return level


logger = logging.getLogger(__name__)
conversation_logger = ConversationLogger.get_logger()
