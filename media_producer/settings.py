"""Configuration for the NFT media producer."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def resolve_logs_dir(value=None) -> Path:
    """LOGS_DIR if set, else ./logs under the working directory."""
    if value:
        return Path(value).expanduser()
    return Path.cwd() / "logs"


# Paths
LOGS_DIR = resolve_logs_dir(os.getenv("LOGS_DIR"))
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
BETTERSTACK_SOURCE_TOKEN = os.getenv("BETTERSTACK_SOURCE_TOKEN")
BETTERSTACK_INGEST_HOST = os.getenv("BETTERSTACK_INGEST_HOST")

# Database connection
DATABASE_URL = os.getenv("DATABASE_URL")

# AWS / SQS
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")
SQS_QUEUE_URL = os.getenv("SQS_QUEUE_URL")

# Ingestion pipeline this deployment polls for
SOURCE = os.getenv("SOURCE")

# Producer settings
POLL_INTERVAL = int(os.getenv("POLL_INTERVAL", "10"))  # seconds between ticks
BATCH_SIZE = int(os.getenv("BATCH_SIZE", "100"))
FETCH_MODE = os.getenv("FETCH_MODE", "batch")  # "batch" or "priority"
SKIPPING_COUNTER_LIMIT = int(os.getenv("SKIPPING_COUNTER_LIMIT", "30"))

FETCH_MODES = ("batch", "priority")


def validate_config():
    """Validate required configuration."""
    errors = []

    if not DATABASE_URL:
        errors.append("DATABASE_URL is required")

    if not SQS_QUEUE_URL:
        errors.append("SQS_QUEUE_URL is required")

    if not SOURCE:
        errors.append("SOURCE is required")

    if FETCH_MODE not in FETCH_MODES:
        errors.append(f"FETCH_MODE must be one of {', '.join(FETCH_MODES)}: {FETCH_MODE}")

    for name, value in (
        ("POLL_INTERVAL", POLL_INTERVAL),
        ("BATCH_SIZE", BATCH_SIZE),
        ("SKIPPING_COUNTER_LIMIT", SKIPPING_COUNTER_LIMIT),
    ):
        if value <= 0:
            errors.append(f"{name} must be positive: {value}")

    if errors:
        raise ValueError("Config errors:\n  " + "\n  ".join(errors))
