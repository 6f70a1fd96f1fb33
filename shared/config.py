import os
import logging
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv, find_dotenv

# Load environment variables from .env file
load_dotenv(find_dotenv(usecwd=True))

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Persisted settings (stand-in for the editor's settings storage)
SETTINGS_PATH = os.getenv(
    "DOCSYNC_SETTINGS_PATH",
    str(Path.home() / ".docsync" / "settings.json"),
)

# HTTP Settings
HTTP_TIMEOUT = float(os.getenv("DOCSYNC_HTTP_TIMEOUT", 30))


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def clean_value(value: Optional[str]) -> Optional[str]:
    """
    Strip whitespace and one pair of surrounding quotes.
    Values copied out of .env files often arrive as "abc" or 'abc'.
    """
    if value is None:
        return None
    value = str(value).strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1].strip()
    return value or None


def resolve_setting(env_var: str, key: str, store=None, default: Optional[str] = None) -> Optional[str]:
    """
    Resolve one field: environment variable first, then the persisted
    settings key, then the default.
    """
    value = clean_value(os.getenv(env_var))
    if value:
        return value
    if store is not None:
        value = clean_value(store.get(key))
        if value:
            return value
    return default


def mask_secret(value: Optional[str]) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"
