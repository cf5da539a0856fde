from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    AUTH_SECRET: str

    APP_NAME: str = "LabSyncPro Timetable API"
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # when false, schedule conflicts are reported but the session is still saved
    ENFORCE_CONFLICTS: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
