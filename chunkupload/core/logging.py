"""Logger helpers shared by chunkupload modules."""
import logging
from typing import Optional

PACKAGE_LOGGER = 'chunkupload'

# Component loggers, one per layer of the upload pipeline
COMPONENTS = (
    'client',
    'api',
    'hashing',
    'upload.coordinator',
    'upload.session',
    'upload.chunk',
    'upload.file',
)


def get_logger(component: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get the logger of a chunkupload component.

    Names are namespaced under the package: ``get_logger('api')`` returns
    ``chunkupload.api``. Until the application configures logging (the
    root logger has no handlers) the logger is held at `level`, or WARNING,
    so an embedding program sees only problems.

    Args:
        component: Component name, with or without the 'chunkupload.' prefix
        level: Level to apply while logging is unconfigured

    Returns:
        Logger propagating to the root logger
    """
    if component != PACKAGE_LOGGER and not component.startswith(PACKAGE_LOGGER + '.'):
        component = f"{PACKAGE_LOGGER}.{component}"
    logger = logging.getLogger(component)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(level if level is not None else logging.WARNING)

    return logger


def setup_logging(level=logging.INFO) -> None:
    """
    Set the level of the package logger and every component logger.

    Handlers stay the application's business; records propagate to root.

    Args:
        level: Logging level (default: logging.INFO)
    """
    for name in (PACKAGE_LOGGER,) + tuple(f"{PACKAGE_LOGGER}.{c}" for c in COMPONENTS):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = True
