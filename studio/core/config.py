# studio/core/config.py
import os
from pydantic import BaseModel, Field

def _default_database_url() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'studio.db')}")

def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}

class Settings(BaseModel):
    DATABASE_URL: str = Field(default_factory=_default_database_url)
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")))
    TIMEZONE: str = Field(default_factory=lambda: os.getenv("TIMEZONE", "UTC"))
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(default_factory=lambda: _env_bool("RUN_MIGRATIONS_ON_STARTUP", "true"))

    # reservas
    LATE_CANCEL_HOURS: int = Field(default_factory=lambda: int(os.getenv("LATE_CANCEL_HOURS", "2")))
    LENIENT_WAITLIST_PROMOTION: bool = Field(default_factory=lambda: _env_bool("LENIENT_WAITLIST_PROMOTION", "true"))
    REMINDER_LEAD_HOURS: int = Field(default_factory=lambda: int(os.getenv("REMINDER_LEAD_HOURS", "24")))

    # check-in
    CHECKIN_WINDOW_MIN_BEFORE: int = Field(default_factory=lambda: int(os.getenv("CHECKIN_WINDOW_MIN_BEFORE", "15")))
    CHECKIN_WINDOW_MIN_AFTER: int = Field(default_factory=lambda: int(os.getenv("CHECKIN_WINDOW_MIN_AFTER", "30")))
    GEOFENCE_RADIUS_METERS: float = Field(default_factory=lambda: float(os.getenv("GEOFENCE_RADIUS_METERS", "500")))

settings = Settings()
