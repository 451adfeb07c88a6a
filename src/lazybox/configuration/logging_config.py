import logging
import sys
import structlog

SENSITIVE_FIELDS = ['password', 'security_key', 'secret', 'token']

def filter_sensitive_data(logger, log_method, event_dict):
    """
    A structlog processor to filter sensitive data from the event dictionary.
    """
    for field in SENSITIVE_FIELDS:
        if field in event_dict:
            event_dict[field] = '[FILTERED]'
    return event_dict


def resolve_log_level(level):
    """Map a level name (e.g. from settings) to a logging level, defaulting to INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(log_level=None, stream=None, force_reconfigure=False):
    """Configure structlog-based JSON logging.

    When `log_level` is omitted the LOG_LEVEL setting is used.
    """
    if stream is None:
        stream = sys.stderr

    # Skip if already configured (unless force_reconfigure is True)
    if not force_reconfigure and hasattr(structlog, '_configured'):
        return

    if log_level is None:
        from lazybox.config import get_lazybox_settings

        log_level = get_lazybox_settings().LOG_LEVEL
    log_level = resolve_log_level(log_level)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=log_level,
        force=True
    )
    logging.root.setLevel(log_level)

    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        filter_sensitive_data,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    structlog._configured = True
