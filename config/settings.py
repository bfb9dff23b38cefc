from pathlib import Path
from typing import ClassVar, List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    RECEIVED_DIR: Path = Path("Received")

    # Limits
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    TEXT_SCAN_LIMIT: int = 4000
    MAX_ARCHIVE_ENTRIES: int = 10000

    # Detection policy
    SNIFFER_BACKEND: str = "filetype"
    DOUBLE_EXTENSION_ALLOWLIST: List[str] = ["tar", "gz", "bak"]

    # Service
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    model_config: ClassVar = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"
    }


settings = Settings()
