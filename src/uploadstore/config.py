# /uploadstore/config.py
"""
Centralized configuration for the upload store.
Reads the storage root, logging and I/O tuning values from the environment.
"""
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from rich.console import Console

# ==============================================================================
# CONSOLE & ENVIRONMENT
# ==============================================================================
console = Console()
load_dotenv()


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return int(default)
    try:
        value = int(raw)
    except ValueError:
        return int(default)
    return max(minimum, value)


# ==============================================================================
# GLOBAL CONFIGURATION
# ==============================================================================
# --- Storage ---
STORAGE_LOCATION = _env_str("STORAGE_LOCATION", "upload-dir")

# --- I/O Tuning ---
COPY_CHUNK_SIZE = _env_int("COPY_CHUNK_SIZE", 64 * 1024, minimum=1024)

# --- Logging ---
LOG_PATH = Path(_env_str("LOG_PATH", str(Path("logs") / "uploadstore.log")))
LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()


# ==============================================================================
# STORAGE PROPERTIES
# ==============================================================================
class StorageProperties(BaseModel):
    """Settings handed to the storage service at construction."""

    location: Path = Field(
        default_factory=lambda: Path(STORAGE_LOCATION),
        description="Directory under which uploaded files are stored",
    )

    @field_validator("location", mode="before")
    @classmethod
    def _reject_blank_location(cls, value):
        if value is None or not str(value).strip():
            raise ValueError("storage location must not be empty")
        return value

    @classmethod
    def from_env(cls) -> "StorageProperties":
        return cls(location=_env_str("STORAGE_LOCATION", STORAGE_LOCATION))
