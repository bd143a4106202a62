"""
Global configuration values for the email viewer service.

Values are read from the environment (a local .env file is honoured).
"""

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass(frozen=True)
class Settings:
    # Shared secret for "Authorization: Bearer <token>"
    API_TOKEN: str = os.getenv("API_TOKEN", "")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    # Comma-separated; only enforced in production
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "")

    # Parsed messages kept in memory; oldest is evicted first
    STORE_CAPACITY: int = _env_int("STORE_CAPACITY", 100)

    # Parser limits
    MAX_NESTING_DEPTH: int = _env_int("MAX_NESTING_DEPTH", 10)
    MAX_UPLOAD_BYTES: int = _env_int("MAX_UPLOAD_BYTES", 25 * 1024 * 1024)

    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def cors_origins(self) -> List[str]:
        if not self.is_production:
            return ["*"]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


CONFIG = Settings()
