from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod
    TZ: str = Field(default="Europe/Prague")

    # DB
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/capacity")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")

    # Celery / Redis
    REDIS_URL: str = Field(default="redis://redis:6379/0")

    # Files
    UPLOAD_DIR: str = Field(default="/app/data/uploads")

    # Calendar
    COUNTRY: str = Field(default="CZ")  # CZ|SK
    HORIZON_START_YEAR: int = Field(default=2025)
    HORIZON_END_YEAR: int = Field(default=2027)
    WEEK_MONTH_MODE: str = Field(default="split")  # split|majority
    HOURS_PER_DAY: float = Field(default=8.0)

    # Business defaults
    HOLIDAY_PRORATION: bool = Field(default=True)
    DEFAULT_HOURLY_RATE: float | None = Field(default=None)
    PRESALES_DEFAULT_HOURS: float = Field(default=100.0)
    DEFAULT_WEEKLY_HOURS: float = Field(default=36.0)
    LICENSE_EXPIRING_DAYS: int = Field(default=30)
    EXCLUDED_SUPPLIER_ENGINEERS: str = Field(
        default="Chrenko Peter,Jurčišin Peter,Púpava Marián,Bohušík Martin,Chrenko Daniel"
    )

    # Feed refresh
    REFRESH_DEBOUNCE_MS: int = Field(default=200)

    # Seed (dev)
    SEED_DEMO: bool = Field(default=True)

    @property
    def excluded_supplier_engineers(self) -> list[str]:
        return [n.strip() for n in self.EXCLUDED_SUPPLIER_ENGINEERS.split(",") if n.strip()]


settings = Settings()
