import warnings
from functools import lru_cache

from fastapi import Request
from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULT = "insecure-default-change-me"


class Settings(BaseSettings):
    # Either a full DATABASE_URL, or composed from the POSTGRES_* parts
    database_url: str = ""
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"  # In Docker, this will be 'postgres'
    postgres_port: int = 5433
    postgres_db: str = "ecommerce"
    db_echo: bool = False

    jwt_secret_key: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    internal_api_key: str = ""

    payment_url: str = "http://localhost:8000/payments"
    payment_timeout_seconds: float = 10.0
    # Currency code and major -> minor unit factor sent to the payment gateway
    payment_currency: str = "mur"
    minor_unit_factor: int = Field(
        default=100,
        validation_alias=AliasChoices("minor_unit_factor", "PAYMENT_MINOR_UNIT_FACTOR"),
    )

    delivery_fee_per_shop: int = 150

    log_level: str = "INFO"
    tracing_enabled: bool = True
    otlp_endpoint: str = "http://localhost:4317"
    rate_limit_enabled: bool = True
    checkout_rate_limit: str = "10/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _fill_defaults(self) -> "Settings":
        if not self.database_url:
            self.database_url = (
                f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        for name in ("jwt_secret_key", "internal_api_key"):
            if not getattr(self, name):
                warnings.warn(
                    f"{name.upper()} is not set. Using an insecure default. "
                    "Set this env var in production!",
                    stacklevel=2,
                )
                setattr(self, name, _INSECURE_DEFAULT)
        return self


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings read from the environment, used to build the default app."""
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """Settings of the app serving this request."""
    return request.app.state.settings
