"""
LoanLens configuration

All settings are read from the .env file or the environment.
Usage:
    from loanlens.config import settings
    timeout = settings.JUSTIFICATION_TIMEOUT
"""

import sys
from typing import Optional

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore variables not declared here
    )

    # === Environment ===
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # === Ranking algorithm ===
    ALGORITHM_VERSION: str = "2.0-four-layer"
    HUMAN_REVIEW_THRESHOLD: float = 70.0

    # === LLM (local llama.cpp model) ===
    MODEL_PATH: str = "models/Qwen2.5-3B-Instruct-Q4_K_M.gguf"
    MODEL_N_CTX: int = 2048
    MODEL_N_GPU_LAYERS: int = 0

    # === Justification generator ===
    # "llm": local model, "http": remote endpoint, "none": templates only
    JUSTIFICATION_BACKEND: str = "llm"
    JUSTIFICATION_URL: str = ""
    JUSTIFICATION_TIMEOUT: float = 8.0
    JUSTIFICATION_CONCURRENCY: int = 4
    REQUEST_TIMEOUT: float = 20.0

    # === Reference data ===
    REFERENCE_DATA_PATH: str = "data/reference_data.json"

    # === Supabase (PostgREST) ===
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_TIMEOUT: int = 30


# singleton instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stderr sink at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "{extra} | <level>{message}</level>"
        ),
    )
