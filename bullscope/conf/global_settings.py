from __future__ import annotations  # Enable postponed evaluation of type hints

import os
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from bullscope import __version__  # noqa: F401

if TYPE_CHECKING:
    from bullscope.logging import LoggingConfig
    from bullscope.stores.base import BaseStore


def env(key: str, default: str = "") -> str:
    """
    Reads a string from the environment, treating empty values as unset.

    Args:
        key: The environment variable name.
        default: The value returned when the variable is unset or empty.

    Returns:
        The environment value or the default.
    """
    value = os.environ.get(key, "")
    return value if value != "" else default


def env_int(key: str, default: int) -> int:
    """
    Reads an integer from the environment. Values that do not parse fall back
    to `default` instead of raising.
    """
    value = os.environ.get(key, "")
    if value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_float(key: str, default: float) -> float:
    value = os.environ.get(key, "")
    if value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def env_log_level(key: str, default: str = "INFO") -> str:
    """
    Reads a logging level name from the environment. Aliases such as `warn`
    are normalized and unknown names fall back to `default`.
    """
    from bullscope.logging import LoggingConfig, normalize_level

    level = normalize_level(env(key, default))
    return level if level in LoggingConfig.__logging_levels__ else default


def env_list(key: str) -> list[str]:
    """
    Reads a comma separated list from the environment, dropping blank items.
    """
    value = os.environ.get(key, "").strip()
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class RedisSettings:
    """
    Connection settings for the Redis (or Valkey) instance being inspected.

    `redis_url` wins when set. Otherwise a URL is assembled from
    `redis_addr`, the credentials and `redis_db`. When `redis_sentinel_master`
    is set, the store connects through Sentinel using `redis_sentinel_addrs`.
    """

    redis_url: str = field(default_factory=lambda: env("REDIS_URL"))
    redis_addr: str = field(default_factory=lambda: env("REDIS_ADDR", "127.0.0.1:6379"))
    redis_username: str = field(default_factory=lambda: env("REDIS_USERNAME"))
    redis_password: str = field(default_factory=lambda: env("REDIS_PASSWORD"))
    redis_db: int = field(default_factory=lambda: env_int("REDIS_DB", 0))

    redis_sentinel_master: str = field(default_factory=lambda: env("REDIS_SENTINEL_MASTER"))
    redis_sentinel_addrs: list[str] = field(default_factory=lambda: env_list("REDIS_SENTINEL_ADDRS"))
    redis_sentinel_username: str = field(default_factory=lambda: env("REDIS_SENTINEL_USERNAME"))
    redis_sentinel_password: str = field(default_factory=lambda: env("REDIS_SENTINEL_PASSWORD"))

    @property
    def connection_url(self) -> str:
        """
        The URL handed to `redis.asyncio.from_url` for standalone connections.
        Credentials are percent-encoded so reserved characters survive.
        """
        if self.redis_url:
            return self.redis_url

        auth = ""
        if self.redis_username or self.redis_password:
            username = quote(self.redis_username, safe="")
            password = quote(self.redis_password, safe="")
            auth = f"{username}:{password}@"
        return f"redis://{auth}{self.redis_addr}/{self.redis_db}"

    @property
    def uses_sentinel(self) -> bool:
        return bool(self.redis_sentinel_master and self.redis_sentinel_addrs)


@dataclass
class Settings(RedisSettings):
    """
    Configuration for bullscope: which store to inspect, how its keys are laid
    out, how partial failures are treated, and how the dashboard and metrics
    poller behave.

    Every default can be overridden through the environment or by pointing
    `BULLSCOPE_SETTINGS_MODULE` at a subclass.
    """

    # Debug mode flag, forwarded to the dashboard application.
    debug: bool = False
    # The logging level for the application (e.g., "INFO", "DEBUG", "WARNING").
    logging_level: str = field(default_factory=lambda: env_log_level("LOG_LEVEL", "INFO"))
    # The version string of bullscope.
    version: str = __version__
    # Flag indicating if logging has been set up.
    is_logging_setup: bool = False

    # A pre-built store. When None, a RedisStore is created from the
    # connection settings on first use.
    store: BaseStore | None = None

    # Key prefix shared by every queue namespace (BullMQ uses "bull").
    queue_prefix: str = field(default_factory=lambda: env("QUEUE_PREFIX", "bull"))
    # Storage layout of the inspected instance: "bullmq" (nine collections)
    # or "legacy" (five collections, failed/completed as plain sets).
    schema: str = field(default_factory=lambda: env("BULLSCOPE_SCHEMA", "bullmq"))
    # What a failed collection read contributes: "degrade" (zero) or
    # "fail_fast" (the error propagates).
    read_policy: str = field(default_factory=lambda: env("BULLSCOPE_READ_POLICY", "degrade"))
    # COUNT hint passed to SCAN.
    scan_count: int = field(default_factory=lambda: env_int("SCAN_COUNT", 100))

    # Dashboard server.
    server_host: str = field(default_factory=lambda: env("SERVER_HOST", "0.0.0.0"))
    server_port: int = field(default_factory=lambda: env_int("SERVER_PORT", 8080))
    # Deadline (seconds) applied to every dashboard request.
    request_timeout: float = field(default_factory=lambda: env_float("REQUEST_TIMEOUT", 10.0))
    # Deadline (seconds) for the store to answer PING when the dashboard starts.
    startup_ping_timeout: float = field(default_factory=lambda: env_float("STARTUP_PING_TIMEOUT", 5.0))
    # Jobs fetched per state for listings.
    job_list_limit: int = field(default_factory=lambda: env_int("JOB_LIST_LIMIT", 100))
    # Jobs fetched per state for the queue detail previews.
    preview_limit: int = 50

    # Interval (seconds) of the background poller refreshing queue gauges.
    metrics_poll_seconds: int = field(default_factory=lambda: env_int("METRICS_POLL_SECONDS", 10))
    # Disables the background poller entirely.
    metrics_poll_enabled: bool = True

    @property
    def logging_config(self) -> LoggingConfig | None:
        """
        Returns the logging configuration built from `logging_level`.
        """
        from bullscope.core.utils.logging import StandardLoggingConfig

        return StandardLoggingConfig(level=self.logging_level)

    def dict(self, exclude_none: bool = False, upper: bool = False) -> dict[str, Any]:
        """
        Dumps the settings into a dictionary.

        Args:
            exclude_none: Drop keys whose value is None.
            upper: Upper-case every key.

        Returns:
            The settings as a dictionary. The store instance is excluded.
        """
        original = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "store"}
        if exclude_none:
            original = {k: v for k, v in original.items() if v is not None}
        if upper:
            return {k.upper(): v for k, v in original.items()}
        return original
