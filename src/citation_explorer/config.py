"""
Configuration
=============

Runtime settings for the repository client and network builder, read from
environment variables.

    S2_API_KEY                      Semantic Scholar API key (optional)
    CITATION_EXPLORER_API_URL       Base URL of the Graph API
    CITATION_EXPLORER_TIMEOUT       Per-request timeout in seconds
    CITATION_EXPLORER_MAX_WORKERS   Concurrent fetches per expansion level
    CITATION_EXPLORER_RATE_LIMIT    Minimum seconds between requests
    CITATION_EXPLORER_MAX_RETRIES   Retries after HTTP 429
    CITATION_EXPLORER_DEPTH         Default expansion depth
"""

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from citation_explorer.exceptions import ConfigError

S2_GRAPH_API = "https://api.semanticscholar.org/graph/v1"

T = TypeVar("T")


@dataclass
class ExplorerConfig:
    """Settings shared by the client, builder and CLI."""

    api_base_url: str = S2_GRAPH_API
    api_key: Optional[str] = None
    timeout: float = 30.0
    max_workers: int = 8
    rate_limit_seconds: float = 0.0
    max_retries: int = 3
    retry_backoff: float = 5.0
    default_depth: int = 2


def _read(environ: Mapping[str, str], name: str, convert: Callable[[str], T], default: T) -> T:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return convert(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e


def load_config(environ: Optional[Mapping[str, str]] = None) -> ExplorerConfig:
    """Load configuration from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ``.

    Returns:
        Populated ExplorerConfig; unset variables keep their defaults.

    Raises:
        ConfigError: If a numeric variable cannot be parsed or is out of range.
    """
    env = os.environ if environ is None else environ
    defaults = ExplorerConfig()

    config = ExplorerConfig(
        api_base_url=env.get("CITATION_EXPLORER_API_URL", "").strip() or defaults.api_base_url,
        api_key=env.get("S2_API_KEY", "").strip() or None,
        timeout=_read(env, "CITATION_EXPLORER_TIMEOUT", float, defaults.timeout),
        max_workers=_read(env, "CITATION_EXPLORER_MAX_WORKERS", int, defaults.max_workers),
        rate_limit_seconds=_read(env, "CITATION_EXPLORER_RATE_LIMIT", float, defaults.rate_limit_seconds),
        max_retries=_read(env, "CITATION_EXPLORER_MAX_RETRIES", int, defaults.max_retries),
        retry_backoff=defaults.retry_backoff,
        default_depth=_read(env, "CITATION_EXPLORER_DEPTH", int, defaults.default_depth),
    )

    if config.max_workers < 1:
        raise ConfigError("CITATION_EXPLORER_MAX_WORKERS must be at least 1")
    if config.default_depth < 0:
        raise ConfigError("CITATION_EXPLORER_DEPTH must not be negative")

    return config
