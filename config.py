import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # API settings
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "5000"))

    # Database settings
    # The logical database name is "libraryDB"; LIBRARY_DB_FILE is re-read at startup.
    database_file: str = os.getenv("LIBRARY_DB_FILE", "libraryDB.db")
    seed_sample_data: bool = _as_bool(os.getenv("SEED_SAMPLE_DATA"), True)

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library API")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def database_file() -> str:
    """Return the database file, honouring LIBRARY_DB_FILE set after import."""
    return os.environ.get("LIBRARY_DB_FILE") or settings.database_file


def seeding_enabled() -> bool:
    return _as_bool(os.environ.get("SEED_SAMPLE_DATA"), settings.seed_sample_data)
