"""Configuration loader for the admin API client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from recruitflow.core.errors import ConfigError
from recruitflow.core.logger import get_logger
from recruitflow.core.profiles import ensure_work_dirs, resolve_config_path

LOGGER = get_logger()

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 30.0
DEFAULT_PROFILE = "default"

BASE_URL_ENV = "RECRUITFLOW_API_URL"
TOKEN_ENV = "RECRUITFLOW_API_TOKEN"
TIMEOUT_ENV = "RECRUITFLOW_TIMEOUT_SEC"
MAILBOX_DIR_ENV = "RECRUITFLOW_MAILBOX_DIR"


@dataclass(slots=True)
class AdminApiConfig:
    """Resolved configuration for admin API operations."""

    base_url: str = DEFAULT_BASE_URL
    token: str | None = None
    timeout_sec: float = DEFAULT_TIMEOUT
    verify_tls: bool = True
    trust_env: bool = False
    proxies: Mapping[str, str] | None = None
    mailbox_dir: str | None = None

    @classmethod
    def from_profile(cls, profile_name: str, *, config_path: str | Path | None = None) -> "AdminApiConfig":
        """Create a configuration instance from profiles.yaml.

        Args:
            profile_name: Logical profile name under the ``admin_api`` section.
            config_path: Optional override for the config file path.

        Returns:
            Parsed ``AdminApiConfig`` instance.

        Raises:
            ConfigError: If the configuration cannot be loaded or is invalid.
        """

        raw = _load_profiles_file(path=config_path).get(profile_name)
        if raw is None:
            raise ConfigError(f"admin_api profile '{profile_name}' not found in profiles.yaml")
        return cls.from_mapping(raw)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AdminApiConfig":
        """Create a configuration instance from a mapping."""

        base_url = _expand_env(data.get("base_url", DEFAULT_BASE_URL))
        if not isinstance(base_url, str) or not base_url.strip():
            raise ConfigError("Missing required admin_api config value: base_url")
        timeout_val = data.get("timeout_sec", DEFAULT_TIMEOUT)
        try:
            timeout = float(timeout_val)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"admin_api timeout_sec must be a number, got {timeout_val!r}") from exc
        proxies_raw = data.get("proxies")
        proxies: Mapping[str, str] | None = None
        if isinstance(proxies_raw, Mapping):
            proxies = {k: _expand_env(v) for k, v in proxies_raw.items()}

        return cls(
            base_url=base_url.strip(),
            token=_expand_env(data.get("token")) or None,
            timeout_sec=timeout,
            verify_tls=bool(data.get("verify_tls", True)),
            trust_env=bool(data.get("trust_env", False)),
            proxies=proxies,
            mailbox_dir=_expand_env(data.get("mailbox_dir")) or None,
        )


def _read_env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    return value.strip()


def _read_env_float(key: str) -> float | None:
    value = _read_env(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {key} must be a number") from exc


def load_base_url(config: AdminApiConfig | None = None) -> str:
    """Return the API base URL from env or configuration."""

    return _read_env(BASE_URL_ENV) or (config.base_url if config else DEFAULT_BASE_URL)


def load_token(config: AdminApiConfig | None = None) -> str:
    """Return the bearer token from env or configuration."""

    value = _read_env(TOKEN_ENV) or (config.token if config else None)
    if not value:
        raise ConfigError(f"Admin API token not configured (set {TOKEN_ENV} or profile token)")
    return value


def load_timeout(config: AdminApiConfig | None = None) -> float:
    """Return the request timeout in seconds."""

    value = _read_env_float(TIMEOUT_ENV)
    if value is not None:
        return value
    if config:
        return float(config.timeout_sec)
    return DEFAULT_TIMEOUT


def load_mailbox_dir(config: AdminApiConfig | None = None) -> Path:
    """Return the directory backing the pending-file mailbox."""

    value = _read_env(MAILBOX_DIR_ENV) or (config.mailbox_dir if config else None)
    if value:
        return Path(value).expanduser()
    return ensure_work_dirs()["mailbox"]


def resolve_config(profile: str | None = None, *, config_path: str | Path | None = None) -> AdminApiConfig:
    """Resolve configuration from a profile or environment variables with overrides."""

    if profile:
        base = AdminApiConfig.from_profile(profile, config_path=config_path)
    else:
        base = AdminApiConfig()
    return AdminApiConfig(
        base_url=load_base_url(base),
        token=_read_env(TOKEN_ENV) or base.token,
        timeout_sec=load_timeout(base),
        verify_tls=base.verify_tls,
        trust_env=base.trust_env,
        proxies=base.proxies,
        mailbox_dir=_read_env(MAILBOX_DIR_ENV) or base.mailbox_dir,
    )


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        expanded = os.path.expandvars(value)
        if "${" in value and "}" in value and expanded == value:
            raise ConfigError(f"Environment variable not set for value: {value}")
        return expanded
    return value


def _load_profiles_file(*, path: str | Path | None) -> dict[str, Mapping[str, Any]]:
    cfg_path = resolve_config_path(path or "profiles.yaml")
    if not cfg_path.exists():
        raise ConfigError(f"profiles.yaml not found at {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    section = data.get("admin_api")
    if not isinstance(section, Mapping):
        raise ConfigError("profiles.yaml missing 'admin_api' section")
    profiles: dict[str, Mapping[str, Any]] = {}
    for key, value in section.items():
        if not isinstance(value, Mapping):
            LOGGER.warning("Ignoring admin_api profile %s with invalid type", key)
            continue
        profiles[str(key)] = value
    if not profiles:
        raise ConfigError("No admin_api profiles defined in profiles.yaml")
    return profiles


__all__ = [
    "AdminApiConfig",
    "BASE_URL_ENV",
    "TOKEN_ENV",
    "TIMEOUT_ENV",
    "MAILBOX_DIR_ENV",
    "DEFAULT_PROFILE",
    "load_base_url",
    "load_token",
    "load_timeout",
    "load_mailbox_dir",
    "resolve_config",
]
