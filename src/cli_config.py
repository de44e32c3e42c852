"""Process configuration: environment toggles plus CLI overrides.

Values are read once at startup. CLI flags have the highest precedence, then
the NPM_CONTEXT_* environment variables, then the defaults in Constants.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from constants import Constants

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a startup setting is invalid."""


@dataclass(frozen=True)
class ServerConfig:
    transport: str
    host: str
    port: int

    @property
    def serves_stdio(self) -> bool:
        return self.transport in ("stdio", "both")

    @property
    def serves_http(self) -> bool:
        return self.transport in ("http", "both")


def _parse_port(raw: str) -> int:
    try:
        port = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid port: {raw!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range: {port}")
    return port


def load_server_config(args, environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """Build the transport configuration from CLI args and the environment.

    Raises:
        ConfigError: Unknown transport or invalid port.
    """
    env = os.environ if environ is None else environ

    transport = (
        getattr(args, "TRANSPORT", None)
        or env.get(Constants.ENV_TRANSPORT)
        or Constants.DEFAULT_TRANSPORT
    ).strip().lower()
    if transport not in Constants.SUPPORTED_TRANSPORTS:
        raise ConfigError(
            f"unsupported transport: {transport} (expected one of {', '.join(Constants.SUPPORTED_TRANSPORTS)})"
        )

    host = getattr(args, "HOST", None) or env.get(Constants.ENV_HOST) or Constants.DEFAULT_HOST
    raw_port = getattr(args, "PORT", None) or env.get(Constants.ENV_PORT)
    port = _parse_port(raw_port) if raw_port else Constants.DEFAULT_PORT

    return ServerConfig(transport=transport, host=host, port=port)


def apply_runtime_overrides(args) -> None:
    """Apply CLI overrides for upstream tunables onto Constants.

    Must run before the service clients are constructed; they read their
    defaults from Constants at construction time.
    """
    timeout = getattr(args, "REQUEST_TIMEOUT", None)
    if timeout is not None:
        if timeout <= 0:
            raise ConfigError(f"request timeout must be positive: {timeout}")
        Constants.REQUEST_TIMEOUT = timeout  # type: ignore[assignment]
    registry_url = getattr(args, "REGISTRY_URL", None)
    if registry_url:
        Constants.REGISTRY_URL_NPM = registry_url.rstrip("/")
    logger.debug(
        "Runtime settings: timeout=%ss registry=%s",
        Constants.REQUEST_TIMEOUT,
        Constants.REGISTRY_URL_NPM,
    )
