import logging
import sys

# Client libraries logging every API call they make
_QUIET_LOGGERS = ["boto3", "botocore", "urllib3", "googleapiclient"]

_default_handler = None


def setup_logger(logging_level, logging_format):
    """Send the etcdbootstrap logs to stderr.

    The cloud client libraries only log warnings unless debugging.
    """
    if isinstance(logging_level, str):
        logging_level = logging.getLevelName(logging_level.upper())
    logger = logging.getLogger("etcdbootstrap")
    logger.setLevel(logging_level)

    global _default_handler
    if _default_handler is None:
        _default_handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(_default_handler)
    _default_handler.setFormatter(logging.Formatter(logging_format))
    logger.propagate = False

    library_level = logging.DEBUG \
        if logging_level == logging.DEBUG else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
