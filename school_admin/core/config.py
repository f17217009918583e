from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "school_admin"

    # overrides the POSTGRES_* settings when set (e.g. sqlite for local runs)
    DATABASE_URL: Optional[str] = None

    ENV: str = "local"
    LOG_LEVEL: str = "INFO"
    AUTO_CREATE_TABLES: bool = True

    JWT_SECRET: str = "CHANGE_ME"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    TOKEN_CACHE_TTL_SECONDS: int = 60
    TOKEN_CACHE_MAXSIZE: int = 10_000

    BCRYPT_ROUNDS: int = 12

    SESSION_OVERLAP_POLICY: Literal["warn", "reject"] = "warn"
    SESSION_MIN_DAYS: int = 30
    SESSION_MAX_DAYS: int = 730

    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://"
            f"{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}"
            f"/{self.POSTGRES_DB}"
        )


settings = Settings()
