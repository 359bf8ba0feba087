"""
Credential lookup by parameter name.

Parameter names follow the Portal's parameter store paths
("/TSheets/accessToken", "/ADP/CYK/SSLCert") and resolve to environment
variables loaded by core.config ("TSHEETS_ACCESS_TOKEN", "ADP_CYK_SSLCERT").
"""

import json
import os
import re
from typing import Any

import core.config  # noqa: F401  (loads .env)
from core.errors import ConfigurationError


def secret_env_name(name: str) -> str:
    """Map a parameter path to its environment variable name."""
    parts = [p for p in re.split(r"[/\-.]+", name) if p]
    parts = [re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", p) for p in parts]
    if not parts:
        raise ConfigurationError(f"Invalid secret name '{name}'")
    return "_".join(parts).upper()


def get_secret(name: str) -> str:
    """
    Return the secret value for a parameter name.

    Raises:
        ConfigurationError: if the secret is missing or empty
    """
    env_name = secret_env_name(name)
    value = os.environ.get(env_name, "").strip()
    if not value:
        raise ConfigurationError(
            f"Secret '{name}' is not configured",
            details=[f"Set the {env_name} environment variable"],
        )
    return value


def get_json_secret(name: str, *required_keys: str) -> dict[str, Any]:
    """Return a JSON object secret, checking that `required_keys` are present and non-empty."""
    raw = get_secret(name)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Secret '{name}' is not valid JSON") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Secret '{name}' must be a JSON object")

    missing = [key for key in required_keys if not data.get(key)]
    if missing:
        raise ConfigurationError(
            f"Secret '{name}' is missing required fields",
            details=[f"Missing: {', '.join(missing)}"],
        )
    return data
