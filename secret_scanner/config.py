from pathlib import Path
import os

from pydantic_settings import BaseSettings

DEFAULT_PATTERNS_FILE = str(Path(__file__).parent / "data" / "patterns.yml")

class Settings(BaseSettings):
    """
    Scanner configuration loaded from environment variables.
    For local development, create a `.env` file in the working directory.
    """
    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Worker pool ---
    SCANNER_WORKERS: int = 4
    CHUNK_SIZE: int = 10000
    PARALLEL_THRESHOLD: int = 10000 # Inputs shorter than this are scanned inline

    # --- Streaming ---
    STREAM_BUFFER_SIZE: int = 100
    STREAM_MAX_LINE_LENGTH: int = 10 * 1024 * 1024

    # --- Catalog ---
    PATTERNS_FILE: str = DEFAULT_PATTERNS_FILE
    ENTROPY_THRESHOLD: float = 4.5 # Used by entropy-only detection

    # --- Display ---
    MASK_EXPOSE: int = 2
    MASK_CHAR: str = "*"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

# A single, globally accessible instance of the settings
settings = Settings()
