import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BOT_TOKEN: str = os.getenv("BOT_TOKEN", "")
AUTHORIZED_USER_ID: int = 0
ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
LLM_MODEL: str = os.getenv("LLM_MODEL", "claude-sonnet-4-20250514")
LLM_MAX_TOKENS: int = 1024
CACHE_DB_PATH: Path = Path(os.getenv("CACHE_DB_PATH", "./data/cache.db"))
FETCH_TIMEOUT: float = 15.0
MAX_HISTORY_MESSAGES: int = 20


def _parse_number(name: str, default: str, cast, minimum=0):
    """Read an env var and cast it, exiting with a clear error on failure."""
    raw = os.getenv(name, default)
    kind = "an integer" if cast is int else "a number"
    try:
        value = cast(raw)
    except ValueError:
        sys.exit(f"Error: {name} must be {kind}, got '{raw}'.")
    if value < minimum:
        sys.exit(f"Error: {name} must be {kind} >= {minimum}, got '{raw}'.")
    return value


def validate_config() -> None:
    """Validate that all required config values are present and valid.

    Exits with a clear error message if anything is missing or invalid.
    """
    global BOT_TOKEN, AUTHORIZED_USER_ID, ANTHROPIC_API_KEY, LLM_MODEL, LLM_MAX_TOKENS, CACHE_DB_PATH, FETCH_TIMEOUT, MAX_HISTORY_MESSAGES

    BOT_TOKEN = os.getenv("BOT_TOKEN", "")
    if not BOT_TOKEN:
        sys.exit("Error: BOT_TOKEN is not set in .env file.")

    raw_user_id = os.getenv("AUTHORIZED_USER_ID", "")
    if not raw_user_id:
        sys.exit("Error: AUTHORIZED_USER_ID is not set in .env file.")

    try:
        AUTHORIZED_USER_ID = int(raw_user_id)
    except ValueError:
        sys.exit(
            f"Error: AUTHORIZED_USER_ID must be an integer, got '{raw_user_id}'."
        )

    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
    if not ANTHROPIC_API_KEY:
        sys.exit("Error: ANTHROPIC_API_KEY is not set in .env file.")

    LLM_MODEL = os.getenv("LLM_MODEL", "claude-sonnet-4-20250514")
    LLM_MAX_TOKENS = _parse_number("LLM_MAX_TOKENS", "1024", int, minimum=1)

    CACHE_DB_PATH = Path(os.getenv("CACHE_DB_PATH", "./data/cache.db"))
    FETCH_TIMEOUT = _parse_number("FETCH_TIMEOUT", "15", float)
    MAX_HISTORY_MESSAGES = _parse_number("MAX_HISTORY_MESSAGES", "20", int)
