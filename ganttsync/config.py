# ganttsync/config.py
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

load_dotenv()

LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseModel):
    store: str = "dataverse"  # "dataverse" or "sql"
    dataverse_url: Optional[str] = None
    dataverse_api_version: str = "v9.1"
    dataverse_token: Optional[str] = None
    db_url: Optional[str] = None
    log_level: str = "INFO"
    license_key: Optional[str] = None

    @field_validator("store")
    @classmethod
    def _check_store(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in {"dataverse", "sql"}:
            raise ValueError("GANTTSYNC_STORE must be 'dataverse' or 'sql'")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in LOG_LEVELS:
            raise ValueError("GANTTSYNC_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        env = {
            "store": os.getenv("GANTTSYNC_STORE"),
            "dataverse_url": os.getenv("DATAVERSE_URL"),
            "dataverse_api_version": os.getenv("DATAVERSE_API_VERSION"),
            "dataverse_token": os.getenv("DATAVERSE_TOKEN"),
            "db_url": os.getenv("GANTTSYNC_DB_URL"),
            "log_level": os.getenv("GANTTSYNC_LOG_LEVEL"),
            "license_key": os.getenv("GANTT_LICENSE_KEY"),
        }
        return cls(**{k: v for k, v in env.items() if v})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
