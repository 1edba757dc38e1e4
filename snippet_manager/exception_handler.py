import logging

LOGGER_NAME = "snippet_manager"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Configure the shared snippet manager logger."""
    logger = logging.getLogger(LOGGER_NAME)
    resolved = getattr(logging, level.upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logger.setLevel(resolved)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def describe_error(error: BaseException) -> str:
    """Short user-facing text for an exception."""
    message = str(error).strip()
    return message or type(error).__name__
