from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    EVENT_STORE_BACKEND: str = "dynamodb"  # dynamodb or memory
    EVENTS_TABLE_NAME: str = "EventStore"

    DYNAMODB_ENDPOINT_URL: str = "http://dynamodb-local:8000"
    AWS_DEFAULT_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = "fake"
    AWS_SECRET_ACCESS_KEY: str = "fake"

    # Header carrying the calling principal, set by the gateway in front of us
    CALLER_HEADER: str = "X-Principal"

    ENABLE_PAGINATION: bool = True
    ENABLE_CAPACITY_LIMIT: bool = True
    REQUIRE_DELETE_CONFIRMATION: bool = False
    DELETE_CONFIRMATION_TOKEN: str = "DELETE"

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
