"""
PM Scan Engine - System Configuration
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Generation ledger path, snapshot-on-startup toggle
v1.0.0 (2026-10-05): Initial configuration module (sheet API, plan code defaults)
"""

from pydantic_settings import BaseSettings
from pathlib import Path
import os


class Settings(BaseSettings):
    """System-wide configuration"""

    # Application
    APP_NAME: str = "PM Scan Engine"
    APP_VERSION: str = "1.1.0"
    DEBUG: bool = False

    # API Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_WORKERS: int = 1  # Single worker: the entity snapshot lives in process memory

    # Remote system of record (sheet web app)
    SHEET_API_URL: str = ""  # Set via environment variable
    SHEET_API_KEY: str = ""
    REMOTE_TIMEOUT: float = 30.0  # seconds
    LOAD_SNAPSHOT_ON_STARTUP: bool = True

    # SQLite Configuration (generation ledger)
    SQLITE_DB_PATH: str = str(Path(__file__).parent / "data" / "pm_scan.db")

    # File Paths
    DATA_DIR: str = str(Path(__file__).parent / "data")
    LOGS_DIR: str = str(Path(__file__).parent / "logs")

    # Plan codes
    PLAN_CODE_PREFIX: str = "PMT"
    DEFAULT_COMPANY_CODE: str = "CTC"  # Used when a company has neither code nor id

    # Work order generation
    UNASSIGNED_ASSET_ID: str = "TBD"
    DEFAULT_REQUESTED_BY: str = "System"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Singleton instance
settings = Settings()


# Create required directories
def init_directories():
    """Create necessary directories if they don't exist"""
    for directory in [settings.DATA_DIR, settings.LOGS_DIR]:
        os.makedirs(directory, exist_ok=True)


if __name__ == "__main__":
    print(f"PM Scan Engine Configuration v{settings.APP_VERSION}")
    print(f"Sheet API: {settings.SHEET_API_URL or '(not configured)'}")
    print(f"SQLite: {settings.SQLITE_DB_PATH}")
    print(f"Plan code pattern: {settings.PLAN_CODE_PREFIX}-<company>-<system>-<equipment type>")
