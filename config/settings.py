"""
Centralized configuration using pydantic-settings.

How it works:
- Reads environment variables automatically (e.g., QUEUE_COOLDOWN_SECONDS env var → Settings.QUEUE_COOLDOWN_SECONDS)
- Falls back to defaults defined here if env vars are not set
- Can also read from a .env file in the project root

Every module imports `settings` from here instead of hardcoding values.
Queue components also accept explicit overrides in their constructors,
so tests never need to touch the environment.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── PostgreSQL (job history) ────────────────────────────────
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "convertqueue"
    POSTGRES_PASSWORD: str = "convertqueue"
    POSTGRES_DB: str = "convertqueue"

    # ── Redis (credits + dead-letter list) ──────────────────────
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # ── Queue ───────────────────────────────────────────────────
    QUEUE_COOLDOWN_SECONDS: float = 1.0    # pause between two jobs
    DEFAULT_MAX_ATTEMPTS: int = 3
    PER_JOB_ESTIMATE_SECONDS: int = 30     # coarse wait estimate per job ahead
    JOB_TIMEOUT_SECONDS: float = 300.0     # 0 disables the per-job timeout

    # ── Credits ─────────────────────────────────────────────────
    DAILY_FREE_CREDITS: int = 15

    # ── Converters ──────────────────────────────────────────────
    OUTPUT_DIR: str = "/tmp/convertqueue"

    # ── Admin ───────────────────────────────────────────────────
    ADMIN_API_KEY: str = ""              # sent as X-Admin-Key; empty disables /admin

    # ── App ─────────────────────────────────────────────────────
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        """Async connection string (uses asyncpg driver)."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def redis_url(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton, import this everywhere
settings = Settings()
