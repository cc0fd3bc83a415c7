"""ENOVIA client configuration from YAML file.

Loads from config/config.yaml with all settings in one place:
- Authentication service (passport) and ENOVIA service URLs
- Login mode and credentials (interactive user or batch service)
- Tenant, security context and CSRF cache window

Environment variables ARE supported using ${VAR_NAME} syntax in YAML files,
and ENOVIA_* variables override individual settings.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

AUTH_MODES = ("user", "batch")


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# Default config file: config/config.yaml in src/ directory
DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"

# Environment variable -> config key
ENV_OVERRIDES = {
    "ENOVIA_PASSPORT_URL": "passport_url",
    "ENOVIA_SERVICE_URL": "service_url",
    "ENOVIA_TENANT": "tenant",
    "ENOVIA_SECURITY_CONTEXT": "security_context",
    "ENOVIA_CSRF_VALIDITY_MINUTES": "csrf_validity_minutes",
    "ENOVIA_TIMEOUT_SECONDS": "timeout_seconds",
    "ENOVIA_AUTH_MODE": "auth_mode",
    "ENOVIA_USERNAME": "username",
    "ENOVIA_PASSWORD": "password",
    "ENOVIA_REMEMBER_ME": "remember_me",
    "ENOVIA_SERVICE_NAME": "service_name",
    "ENOVIA_SERVICE_SECRET": "service_secret",
    "ENOVIA_ON_BEHALF_OF": "on_behalf_of",
}


@dataclass
class EnoviaConfig:
    """ENOVIA client configuration.

    Configuration structure:
        enovia:
          passport_url: https://plm.example.com/3dpassport
          service_url: https://plm.example.com/enovia
          tenant: ...                 # cloud only
          security_context: ...
          csrf_validity_minutes: 55
          timeout_seconds: 30
          auth:
            mode: user | batch
            username / password / remember_me            # user
            service_name / service_secret / on_behalf_of # batch
    """

    passport_url: str = ""
    service_url: str = ""
    tenant: Optional[str] = None
    security_context: Optional[str] = None
    csrf_validity_minutes: int = 55
    timeout_seconds: int = 30

    auth_mode: str = "user"
    username: str = ""
    password: str = ""
    remember_me: bool = False
    service_name: str = ""
    service_secret: str = ""
    on_behalf_of: str = ""

    def validate(self) -> None:
        """Validate configuration for correctness and constraints.

        Checks URLs, the login mode and the credentials that mode needs.
        """
        for name in ("passport_url", "service_url"):
            value = getattr(self, name)
            if not value:
                raise ValueError(f"{name} is required in enovia section")
            if not value.startswith(("http://", "https://")):
                raise ValueError(f"{name} must start with http:// or https://, got: {value!r}")

        if self.auth_mode not in AUTH_MODES:
            raise ValueError(f"auth.mode must be one of {AUTH_MODES}, got: {self.auth_mode!r}")

        if self.auth_mode == "user":
            required = ("username", "password")
        else:
            required = ("service_name", "service_secret", "on_behalf_of")
        missing = [name for name in required if not getattr(self, name)]
        if missing:
            raise ValueError(
                f"auth.mode={self.auth_mode} requires: {', '.join(missing)}"
            )

        if self.csrf_validity_minutes <= 0:
            raise ValueError("csrf_validity_minutes must be positive")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _flatten(section: Dict[str, Any]) -> Dict[str, Any]:
    """Lift the auth sub-section into flat EnoviaConfig keys."""
    flat = {key: value for key, value in section.items() if key != "auth"}
    auth = section.get("auth") or {}
    for key, value in auth.items():
        flat["auth_mode" if key == "mode" else key] = value
    return flat


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> EnoviaConfig:
    """Load ENOVIA configuration from config.yaml file.

    Priority (highest to lowest): overrides, ENOVIA_* environment variables,
    YAML values, dataclass defaults.

    A missing default config file means environment only; an explicit
    config_path that does not exist raises FileNotFoundError.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE
    elif not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if config_path.exists():
        logger.info(f"Loading configuration from file: {config_path}")
        yaml_data = _expand_env_vars(load_yaml(config_path))
        if yaml_data and "enovia" not in yaml_data:
            raise ValueError(
                "Invalid config file: missing 'enovia:' section\n"
                "See config.yaml.example for correct structure"
            )
        section = _flatten(yaml_data.get("enovia") or {})
    else:
        logger.info(f"No configuration file at {config_path}, using environment only")
        section = {}

    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            section[key] = value

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        section = _deep_merge(section, overrides)

    config = EnoviaConfig(
        passport_url=str(section.get("passport_url", "")).rstrip("/"),
        service_url=str(section.get("service_url", "")).rstrip("/"),
        tenant=section.get("tenant") or None,
        security_context=section.get("security_context") or None,
        csrf_validity_minutes=int(section.get("csrf_validity_minutes", 55)),
        timeout_seconds=int(section.get("timeout_seconds", 30)),
        auth_mode=str(section.get("auth_mode", "user")).lower(),
        username=section.get("username", ""),
        password=section.get("password", ""),
        remember_me=_as_bool(section.get("remember_me", False)),
        service_name=section.get("service_name", ""),
        service_secret=section.get("service_secret", ""),
        on_behalf_of=section.get("on_behalf_of", ""),
    )

    logger.debug("Validating configuration...")
    config.validate()
    logger.debug(
        "Configuration loaded",
        extra={
            "passport_url": config.passport_url,
            "service_url": config.service_url,
            "auth_type": config.auth_mode,
        },
    )
    return config

