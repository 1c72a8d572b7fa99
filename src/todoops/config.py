import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SERVICE_HOST = os.getenv("SERVICE_HOST", "0.0.0.0")
SERVICE_PORT = int(os.getenv("SERVICE_PORT", 8000))

API_PREFIX = os.getenv("API_PREFIX", "/api/v1")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None

# Schema creation on startup; disable when migrations are applied with Alembic
AUTO_CREATE_SCHEMA = _env_flag("AUTO_CREATE_SCHEMA", True)
SEED_DEMO_DATA = _env_flag("SEED_DEMO_DATA", False)

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 20))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 100))

if not 1 <= DEFAULT_PAGE_SIZE <= MAX_PAGE_SIZE:
    raise ValueError(
        f"DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE ({MAX_PAGE_SIZE}), got {DEFAULT_PAGE_SIZE}"
    )
