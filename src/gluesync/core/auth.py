"""Client construction for AWS Glue and Snowflake.

This module centralizes creation of the catalog and source clients and
applies the transport policy (bounded retries, connect/read timeouts) in
one place. Credentials are either resolved by boto3 (named profile,
environment, instance role) or passed in explicitly as a short-lived
access-key/secret/session-token triple; rebuild the client when they rotate.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import boto3
import snowflake.connector
from botocore.config import Config
from botocore.exceptions import (
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ProfileNotFound,
)
from snowflake.connector.errors import Error as SnowflakeError

MAX_ATTEMPTS_ENV = "GLUESYNC_MAX_ATTEMPTS"
CONNECT_TIMEOUT_ENV = "GLUESYNC_CONNECT_TIMEOUT"
READ_TIMEOUT_ENV = "GLUESYNC_READ_TIMEOUT"

DEFAULT_MAX_ATTEMPTS = 9
DEFAULT_CONNECT_TIMEOUT = 30
DEFAULT_READ_TIMEOUT = 30
DEFAULT_MAX_POOL_CONNECTIONS = 50


class AuthError(RuntimeError):
    """Raised when a client cannot be configured or authenticated."""


@dataclass(frozen=True)
class AwsCredentials:
    """Short-lived AWS credentials handed over by a credential provider."""

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None


@dataclass(frozen=True)
class SnowflakeSettings:
    """Connection settings for the Snowflake source account."""

    account: str
    user: str
    password: str | None = None
    warehouse: str | None = None
    role: str | None = None
    database: str | None = None
    schema: str | None = None


def _env_int(name: str, default: int) -> int:
    """Return a positive int from the environment, or the default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def transport_config() -> Config:
    """Return the botocore transport policy used for catalog clients."""
    return Config(
        retries={"total_max_attempts": _env_int(MAX_ATTEMPTS_ENV, DEFAULT_MAX_ATTEMPTS)},
        connect_timeout=_env_int(CONNECT_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT),
        read_timeout=_env_int(READ_TIMEOUT_ENV, DEFAULT_READ_TIMEOUT),
        max_pool_connections=DEFAULT_MAX_POOL_CONNECTIONS,
    )


def _sanitize_region(region: str | None) -> str | None:
    """Normalize a region name (`` US-West-2 `` -> ``us-west-2``)."""
    if not region:
        return None
    return region.strip().lower() or None


def get_client(
    profile: str | None = None,
    region: str | None = None,
    credentials: AwsCredentials | None = None,
) -> Any:
    """
    Create and return a configured boto3 Glue client.

    Explicit credentials win over the profile. Without either, boto3's
    default credential chain is used.
    """
    try:
        if credentials is not None:
            session = boto3.Session(
                aws_access_key_id=credentials.access_key_id,
                aws_secret_access_key=credentials.secret_access_key,
                aws_session_token=credentials.session_token,
                region_name=_sanitize_region(region),
            )
        else:
            session = boto3.Session(
                profile_name=profile or None,
                region_name=_sanitize_region(region),
            )
        client = session.client("glue", config=transport_config())
    except ProfileNotFound as exc:
        raise AuthError(
            f"AWS profile '{profile}' not found. Configure it with:\n"
            f"  $ aws configure --profile {profile}"
        ) from exc
    except NoRegionError as exc:
        raise AuthError(
            "No AWS region configured. Pass --region or set AWS_REGION."
        ) from exc
    except (NoCredentialsError, PartialCredentialsError) as exc:
        raise AuthError(f"AWS credentials are incomplete: {exc}") from exc
    return client


def get_snowflake_connection(settings: SnowflakeSettings) -> Any:
    """Open a Snowflake connection for the source account."""
    params: dict[str, Any] = {"account": settings.account, "user": settings.user}
    for key in ("password", "warehouse", "role", "database", "schema"):
        value = getattr(settings, key)
        if value:
            params[key] = value
    try:
        return snowflake.connector.connect(**params)
    except SnowflakeError as exc:
        raise AuthError(f"Snowflake connection failed: {exc}") from exc
