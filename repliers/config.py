"""Environment based configuration.

Values are read from ``REPLIERS_*`` environment variables.  A ``.env`` file is
loaded first when present; variables already set in the environment win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .constants import DEFAULT_BASE_URL, DEFAULT_POOL_MAXSIZE, DEFAULT_TIMEOUT
from .errors import ValidationError

ENV_API_KEY = "REPLIERS_API_KEY"
ENV_BASE_URL = "REPLIERS_BASE_URL"
ENV_TIMEOUT = "REPLIERS_TIMEOUT"
ENV_POOL_MAXSIZE = "REPLIERS_POOL_MAXSIZE"


def _clean_env(value: Optional[str]) -> str:
    """Trim whitespace and surrounding quotes from env values."""
    if value is None:
        return ""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        value = value[1:-1]
    return value.strip()


@dataclass(frozen=True, slots=True)
class Settings:
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    pool_maxsize: int = DEFAULT_POOL_MAXSIZE


def load_settings(
    env_file: Optional[str] = None,
    *,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    pool_maxsize: Optional[int] = None,
) -> Settings:
    """Read :class:`Settings` from the environment.

    Keyword arguments that are not ``None`` take precedence over the matching
    environment variable.  Raises :class:`~repliers.errors.ValidationError`
    when the API key is missing or a numeric value is malformed or not
    positive.
    """

    load_dotenv(env_file)

    api_key = _clean_env(api_key) if api_key is not None else _clean_env(os.getenv(ENV_API_KEY))
    if not api_key:
        raise ValidationError(f"No API key given and {ENV_API_KEY} is not set.")

    base_url = (_clean_env(base_url) if base_url is not None else _clean_env(os.getenv(ENV_BASE_URL))) or DEFAULT_BASE_URL
    if timeout is None:
        timeout = _parse_number(ENV_TIMEOUT, float, DEFAULT_TIMEOUT)
    if pool_maxsize is None:
        pool_maxsize = _parse_number(ENV_POOL_MAXSIZE, int, DEFAULT_POOL_MAXSIZE)
    if not (timeout > 0 and pool_maxsize > 0):
        raise ValidationError(f"timeout ({timeout}) and pool_maxsize ({pool_maxsize}) must be positive.")
    return Settings(api_key=api_key, base_url=base_url, timeout=timeout, pool_maxsize=pool_maxsize)


def _parse_number(name: str, kind, default):
    raw = _clean_env(os.getenv(name))
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a {kind.__name__}, got {raw!r}.") from exc
