from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenStoreSettings(BaseSettings):
    # Location of the SQLite file backing the store (":memory:" for ephemeral stores)
    db_path: str = "./tokens.db"
    # bcrypt cost factor; each increment doubles hashing time
    hash_rounds: int = Field(default=10, ge=4, le=31)
    # Interval for the background expired-token sweeper (seconds)
    purge_interval_seconds: int = Field(default=3600, gt=0)
    # Echo SQL statements to the log (debugging only)
    echo: bool = False

    model_config = SettingsConfigDict(
        env_prefix="TOKENSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
