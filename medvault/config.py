from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the health records backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        data_root_default = base_dir.parent / "data"

        self.data_root: Path = Path(
            os.environ.get("MEDVAULT_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("MEDVAULT_DB_PATH") or (self.data_root / "medvault.db")
        ).expanduser()
        # In production you MUST set MEDVAULT_TOKEN_SECRET. The dev fallback keeps local
        # demos easy but is not safe for public deployments.
        self.token_secret: str = os.environ.get("MEDVAULT_TOKEN_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("MEDVAULT_TOKEN_TTL_DAYS") or "7")
        self.log_level: str = os.environ.get("MEDVAULT_LOG_LEVEL") or "INFO"
        self.host: str = os.environ.get("MEDVAULT_HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("MEDVAULT_PORT") or "8000")

        cors = os.environ.get("MEDVAULT_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


def load_settings() -> Settings:
    """Re-read the environment (tests point the app at temp directories)."""
    return Settings()


settings = Settings()
