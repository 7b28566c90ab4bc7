from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        env_prefix="TIMESCOPE_",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Default boundary columns ─────────────────────────
    # Named scopes prepend "<scope name>_" to these.
    start_column: str = "start_at"
    end_column: str = "end_at"

    # ── Clock ────────────────────────────────────────────
    # False makes now() return naive local time, for schemas that store
    # timestamps without a zone.
    utc_now: bool = True


settings = Settings()
