"""Logging configuration with Betterstack support."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from logtail import LogtailHandler

from media_producer import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty client libraries
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer")


def setup_logging():
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Rotating file, kept at INFO regardless of console level
    file_handler = RotatingFileHandler(
        settings.LOGS_DIR / "media_producer.log", maxBytes=10 * 1024 * 1024, backupCount=5
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if settings.BETTERSTACK_SOURCE_TOKEN:
        try:
            handler_kwargs = {"source_token": settings.BETTERSTACK_SOURCE_TOKEN}
            if settings.BETTERSTACK_INGEST_HOST:
                handler_kwargs["host"] = settings.BETTERSTACK_INGEST_HOST
            betterstack_handler = LogtailHandler(**handler_kwargs)
            betterstack_handler.setLevel(logging.INFO)
            betterstack_handler.setFormatter(formatter)
            root_logger.addHandler(betterstack_handler)
            root_logger.info(
                f"BetterStack logging enabled (host: {settings.BETTERSTACK_INGEST_HOST or 'default'})"
            )
        except Exception as e:
            root_logger.warning(f"Failed to initialize BetterStack logging: {e}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("media_producer")


logger = setup_logging()
