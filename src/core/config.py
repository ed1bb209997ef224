from os import environ

import boto3
from pydantic import BaseModel, ConfigDict, Field

_cached_expo_token: str | None = None

DEFAULT_FARE_SOURCE_URL = "https://www.redbus.in/rpw/api/searchResults"
DEFAULT_EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"


def _resolve_expo_token() -> str:
    """Fetch the Expo access token from Secrets Manager at runtime, with caching."""
    global _cached_expo_token
    if _cached_expo_token is not None:
        return _cached_expo_token

    # Local dev: use env var directly
    direct = environ.get("EXPO_ACCESS_TOKEN", "")
    if direct:
        _cached_expo_token = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN. Push security is optional on Expo,
    # so an unset ARN means unauthenticated sends.
    arn = environ.get("EXPO_ACCESS_TOKEN_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_expo_token = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_expo_token


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    database_host: str
    database_port: int
    database_name: str
    database_user: str
    database_password: str
    database_secret_arn: str | None = None
    fare_source_url: str = DEFAULT_FARE_SOURCE_URL
    fare_source_timeout: float = Field(default=15.0, gt=0)
    expo_push_url: str = DEFAULT_EXPO_PUSH_URL
    expo_access_token: str = ""
    push_batch_size: int = Field(default=100, ge=1, le=100)
    fare_check_workers: int = Field(default=4, ge=1)
    log_level: str = "INFO"
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config, for testing only."""
    global _cached_config, _cached_expo_token
    _cached_config = None
    _cached_expo_token = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "ap-south-1"),
        database_host=environ.get("DATABASE_HOST", "localhost"),
        database_port=int(environ.get("DATABASE_PORT", "5432")),
        database_name=environ.get("DATABASE_NAME", "farewatch"),
        database_user=environ.get("DATABASE_USER", "farewatch"),
        database_password=environ.get("DATABASE_PASSWORD", "localdev"),
        database_secret_arn=environ.get("DATABASE_SECRET_ARN"),
        fare_source_url=environ.get("FARE_SOURCE_URL", DEFAULT_FARE_SOURCE_URL),
        fare_source_timeout=float(environ.get("FARE_SOURCE_TIMEOUT", "15")),
        expo_push_url=environ.get("EXPO_PUSH_URL", DEFAULT_EXPO_PUSH_URL),
        expo_access_token=_resolve_expo_token(),
        push_batch_size=int(environ.get("PUSH_BATCH_SIZE", "100")),
        fare_check_workers=int(environ.get("FARE_CHECK_WORKERS", "4")),
        log_level=environ.get("LOG_LEVEL", "INFO"),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config
