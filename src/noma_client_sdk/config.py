from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from dotenv import load_dotenv

DEFAULT_APP_NAME = "noma"
DEFAULT_JWT_ALGORITHM = "RS256"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    core_api_base_url: str
    noma_api_base_url: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    renewal_timeout_seconds: float = 10.0
    max_auth_retries: int = 1
    max_connections: int = 20
    verify_ssl: bool = True
    auth_public_key: str | None = None
    auth_jwt_algorithm: str = DEFAULT_JWT_ALGORITHM
    auth_issuer: str | None = None
    auth_audience: str | None = None
    product_code: str | None = None
    app_name: str = DEFAULT_APP_NAME
    signin_path: str = "/api/core/v1/signin"
    refresh_path: str = "/api/core/v1/refresh"

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()


def _require(values: dict[str, str | None], required: Iterable[str]) -> None:
    missing = [key for key in required if not values.get(key)]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _read_optional(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def _public_key(raw: str | None) -> str | None:
    # Keys pasted into .env files usually carry escaped newlines.
    if raw is None:
        return None
    return raw.replace("\\n", "\n")


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    env_name = (os.getenv("NOMA_ENV") or "dev").strip()
    env_key = env_name.upper()

    core_api_base_url = (
        (os.getenv(f"NOMA_CORE_API_URL_{env_key}") or "").strip()
        or (os.getenv("NOMA_CORE_API_URL") or "").strip()
    )
    noma_api_base_url = (
        (os.getenv(f"NOMA_API_URL_{env_key}") or "").strip()
        or (os.getenv("NOMA_API_URL") or "").strip()
        or core_api_base_url
    )

    timeout_seconds = _read_float("NOMA_TIMEOUT_SECONDS", "15")
    _validate(
        timeout_seconds > 0,
        f"Invalid NOMA_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    connect_timeout_seconds = _read_float(
        "NOMA_CONNECT_TIMEOUT_SECONDS", str(min(timeout_seconds, 5.0))
    )
    _validate(
        connect_timeout_seconds > 0,
        (
            "Invalid NOMA_CONNECT_TIMEOUT_SECONDS: "
            f"expected > 0, got {connect_timeout_seconds}"
        ),
    )

    renewal_timeout_seconds = _read_float("NOMA_RENEWAL_TIMEOUT_SECONDS", "10")
    _validate(
        renewal_timeout_seconds > 0,
        (
            "Invalid NOMA_RENEWAL_TIMEOUT_SECONDS: "
            f"expected > 0, got {renewal_timeout_seconds}"
        ),
    )

    max_auth_retries = _read_int("NOMA_MAX_AUTH_RETRIES", "1")
    _validate(
        max_auth_retries >= 0,
        f"Invalid NOMA_MAX_AUTH_RETRIES: expected >= 0, got {max_auth_retries}",
    )

    max_connections = _read_int("NOMA_MAX_CONNECTIONS", "20")
    _validate(
        max_connections >= 1,
        f"Invalid NOMA_MAX_CONNECTIONS: expected >= 1, got {max_connections}",
    )

    verify_ssl = _coerce_bool(os.getenv("NOMA_VERIFY_SSL"), True)

    values = {"NOMA_CORE_API_URL": core_api_base_url}
    _require(values, ["NOMA_CORE_API_URL"])

    return ClientConfig(
        env_name=env_name,
        core_api_base_url=core_api_base_url.rstrip("/"),
        noma_api_base_url=noma_api_base_url.rstrip("/"),
        connect_timeout_seconds=connect_timeout_seconds,
        read_timeout_seconds=timeout_seconds,
        renewal_timeout_seconds=renewal_timeout_seconds,
        max_auth_retries=max_auth_retries,
        max_connections=max_connections,
        verify_ssl=verify_ssl,
        auth_public_key=_public_key(_read_optional("NOMA_AUTH_PUBLIC_KEY")),
        auth_jwt_algorithm=_read_optional("NOMA_AUTH_JWT_ALGORITHM") or DEFAULT_JWT_ALGORITHM,
        auth_issuer=_read_optional("NOMA_AUTH_ISSUER"),
        auth_audience=_read_optional("NOMA_AUTH_AUDIENCE"),
        product_code=_read_optional("NOMA_PRODUCT_CODE"),
        app_name=_read_optional("NOMA_APP_NAME") or DEFAULT_APP_NAME,
    )
