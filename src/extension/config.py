from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from common.nuget import DEFAULT_SEARCH_URL


ENV_SIGN_IN_URL = "SIGN_IN_URL"
ENV_SEARCH_URL = "NUGET_SEARCH_URL"  # optional; defaults to the public NuGet search endpoint
ENV_TIMEOUT = "NUGET_TIMEOUT"  # optional; seconds, defaults to 15
ENV_PARAM_PREFIX = "PARAM_PREFIX"  # optional; enables SSM lookups

DEFAULT_TIMEOUT = 15.0


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""


@dataclass(frozen=True)
class ExtensionConfig:
    sign_in_url: str
    search_url: str = DEFAULT_SEARCH_URL
    timeout: float = DEFAULT_TIMEOUT


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


def _require(v: Optional[str], what: str) -> str:
    if not v:
        raise ConfigError(f"Missing required configuration: {what}")
    return v


def _load_ssm_params(prefix: str, names: Iterable[str]) -> Dict[str, Optional[str]]:
    import boto3
    from botocore.exceptions import ClientError

    ssm = boto3.client("ssm")
    out: Dict[str, Optional[str]] = {k: None for k in names}
    for name in names:
        full = f"{prefix}{name}"
        try:
            resp = ssm.get_parameter(Name=full, WithDecryption=True)
        except ClientError as e:
            # Leave as None if parameter missing or access denied
            code = e.response.get("Error", {}).get("Code")
            if code in ("ParameterNotFound", "AccessDeniedException"):
                continue
            raise
        val = resp.get("Parameter", {}).get("Value")
        out[name] = val if isinstance(val, str) and val != "" else None
    return out


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid {ENV_TIMEOUT}: {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{ENV_TIMEOUT} must be > 0, got {raw!r}")
    return value


def load_config() -> ExtensionConfig:
    """
    Resolve extension configuration.

    Environment variables win. When PARAM_PREFIX is set, anything missing from
    the environment is looked up in SSM Parameter Store under
    `{PARAM_PREFIX}sign_in_url`, `{PARAM_PREFIX}search_url` and
    `{PARAM_PREFIX}timeout`.
    """
    sign_in_url = _getenv(ENV_SIGN_IN_URL)
    search_url = _getenv(ENV_SEARCH_URL)
    timeout = _getenv(ENV_TIMEOUT)

    prefix = _getenv(ENV_PARAM_PREFIX)
    if prefix and not (sign_in_url and search_url and timeout):
        params = _load_ssm_params(prefix, ["sign_in_url", "search_url", "timeout"])
        sign_in_url = sign_in_url or params.get("sign_in_url")
        search_url = search_url or params.get("search_url")
        timeout = timeout or params.get("timeout")

    return ExtensionConfig(
        sign_in_url=_require(sign_in_url, ENV_SIGN_IN_URL),
        search_url=search_url or DEFAULT_SEARCH_URL,
        timeout=_parse_timeout(timeout),
    )
