from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, ValidationInfo, field_validator


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    auth_secret: str = Field(alias="AUTH_SECRET")
    auth_secret_previous: str | None = Field(default=None, alias="AUTH_SECRET_PREVIOUS")
    auth_algorithm: str = Field(default="HS256", alias="AUTH_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    store_timezone: str = Field(default="America/Sao_Paulo", alias="STORE_TIMEZONE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def AUTH_SECRETS_LIST(self) -> list[str]:
        secrets = [self.auth_secret]
        if self.auth_secret_previous and self.auth_secret_previous not in secrets:
            secrets.append(self.auth_secret_previous)
        return secrets

    @field_validator("auth_secret", "auth_secret_previous")
    @classmethod
    def validate_secrets(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None and info.field_name == "auth_secret_previous":
            return value
        if not value or value == "change-me" or len(value) < 32:
            raise ValueError(f"{info.field_name.upper()} must be set and at least 32 chars long")
        return value

    @field_validator("store_timezone")
    @classmethod
    def validate_store_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown STORE_TIMEZONE: {value}") from exc
        return value


settings = Settings()


def _engine_kwargs(url: str) -> dict:
    # sqlite (tests, local runs) needs a single shared connection across threads
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


class Base(DeclarativeBase):
    pass


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
