from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    PRACTICE_API_BASE_URL: str = "http://localhost:3000/api"
    PRACTICE_API_TOKEN: str | None = None
    PRACTICE_API_TIMEOUT_SECONDS: float = 30.0

    PRACTICE_TIMEZONE: str = "Europe/Amsterdam"

    FALLBACK_SLOT_TIMES: list[str] = ["09:00", "10:00", "11:00", "14:00", "15:00", "16:00", "17:00"]
    BOOKING_SESSION_LIMIT: int = 1000


settings = Settings()
