from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SECRET_KEY = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "Brand Login Reporting"
    ENVIRONMENT: str = "development"
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    DATABASE_URL: str = "sqlite+pysqlite:///./brandlog.db"
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "change-me"
    EVENTS_DEFAULT_PAGE_SIZE: int = 100
    EVENTS_MAX_PAGE_SIZE: int = 1000
    EXPORTS_BATCH_SIZE: int = 500
    EXPORTS_CHUNK_BYTES: int = 64 * 1024
    METRICS_ENABLED: bool = True

    @model_validator(mode="after")
    def ensure_production_secret(self):
        if self.ENVIRONMENT.lower() == "production" and self.SECRET_KEY in ("", DEFAULT_SECRET_KEY):
            raise ValueError("SECRET_KEY must be configured in production")
        return self


settings = Settings()
