from datetime import timedelta
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="SCHOOLMS_"
    )

    DATABASE_URL: str = f"sqlite:///{BASE_DIR}/school.db"

    # DEV ONLY default; set SCHOOLMS_SECRET_KEY in production.
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    STATEMENT_TIMEOUT_SECONDS: float = 5.0
    TRANSACTION_GATE_TIMEOUT_SECONDS: float = 10.0

    LOG_LEVEL: str = "INFO"


settings = Settings()

DATABASE_URL = settings.DATABASE_URL
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
STATEMENT_TIMEOUT_SECONDS = settings.STATEMENT_TIMEOUT_SECONDS
TRANSACTION_GATE_TIMEOUT_SECONDS = settings.TRANSACTION_GATE_TIMEOUT_SECONDS
LOG_LEVEL = settings.LOG_LEVEL

# Account defaults used by the admin quick-add forms
DEFAULT_MAX_UNITS = 18.0
DEFAULT_MAX_COURSES = 5
DEFAULT_COURSES_TAUGHT = 0

MIN_PASSWORD_LENGTH = 6

# Grade / attendance are percentages
GRADE_MIN = 0.0
GRADE_MAX = 100.0

NOT_ASSIGNED = "Not Assigned"
