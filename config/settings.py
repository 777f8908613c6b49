"""
Centralized configuration using pydantic-settings.

How it works:
- Reads environment variables automatically (e.g., POSTGRES_HOST env var → Settings.POSTGRES_HOST)
- Falls back to defaults defined here if env vars are not set
- Can also read from a .env file in the project root

Every module imports `settings` from here instead of hardcoding values.
Role ids, admin addresses and the support phone number used to be scattered
across environment lookups deep inside the booking code; they live here now
and are passed explicitly into the flows that need them.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── PostgreSQL ──────────────────────────────────────────────
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "bookings"
    POSTGRES_PASSWORD: str = "bookings"
    POSTGRES_DB: str = "bookings"

    # ── Redis (notification outbox) ─────────────────────────────
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    OUTBOX_KEY_PREFIX: str = "bookings:outbox"

    # ── Booking rules ───────────────────────────────────────────
    CANCELLATION_NOTICE_HOURS: int = 24   # customer withdraw before/after, translator cancel window
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_NAME: str = "Admin"
    SUPPORT_PHONE: str = "+46 73 75 86 865"

    # ── Push delivery ───────────────────────────────────────────
    LOCAL_TIMEZONE: str = "Europe/Stockholm"
    NIGHT_START_HOUR: int = 22         # local hour when night-muted users stop getting pushes
    NIGHT_END_HOUR: int = 7            # local hour when delayed pushes are released

    # ── App ─────────────────────────────────────────────────────
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        """Connection string for the booking sessions (uses psycopg2 driver)."""
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def redis_url(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Shared instance, imported everywhere
settings = Settings()
