"""
Naqiy Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

# Render sets RENDER=true automatically
_ON_RENDER = os.getenv("RENDER", "").lower() == "true"
_DEFAULT_DB_PATH = "/data/naqiy.db" if _ON_RENDER else "naqiy.db"


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    ENGINE_VERSION: str = "1.0.0"
    API_VERSION: str = "1"

    # --- Store ---
    DB_PATH: str = os.getenv("NAQIY_DB_PATH", _DEFAULT_DB_PATH)
    SEED_ON_STARTUP: bool = os.getenv("NAQIY_SEED_ON_STARTUP", "true").lower() == "true"

    # --- Trust Score ---
    HALF_LIFE_YEARS: float = float(os.getenv("NAQIY_HALF_LIFE_YEARS", "5.0"))
    SIGMOID_K: float = float(os.getenv("NAQIY_SIGMOID_K", "0.06"))
    PENALTY_FLOOR: float = float(os.getenv("NAQIY_PENALTY_FLOOR", "-50.0"))

    # --- Materializer ---
    MATERIALIZE_MAX_RETRIES: int = int(
        os.getenv("NAQIY_MATERIALIZE_RETRIES", "3")
    )

    # --- Read-side cache ---
    CACHE_TTL_SECONDS: int = int(os.getenv("NAQIY_CACHE_TTL", "3600"))

    # --- Rulings ---
    DEFAULT_LANGUAGE: str = os.getenv("NAQIY_DEFAULT_LANGUAGE", "fr")

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("NAQIY_CORS_ORIGINS", "*")


settings = Settings()
