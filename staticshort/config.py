import os
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

DEFAULT_HOST = "0.0.0.0:8080"


class Settings(BaseSettings):
    """Server settings, read from ``SR_REDIR__*`` environment variables."""
    model_config = SettingsConfigDict(env_prefix="SR_REDIR__", extra="ignore")

    HOST: str = DEFAULT_HOST  # host:port, IPv6 hosts in brackets
    LOG_JSON: bool = True
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # Optional endpoints; unset keeps every path free for redirect rules
    METRICS_PATH: str | None = None
    HEALTH_PATH: str | None = None

    @field_validator("METRICS_PATH", "HEALTH_PATH")
    @classmethod
    def absolute_path(cls, value: str | None) -> str | None:
        """Give endpoint paths a leading slash, like rule paths; empty means unset."""
        if value and not value.startswith("/"):
            return f"/{value}"
        return value or None

    def bind_address(self) -> tuple[str, int]:
        """
        Split ``HOST`` into the host and port handed to the listener.

        Raises:
            ValueError: HOST is not ``host:port`` with a port in 0-65535
        """
        host, sep, port = self.HOST.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"SR_REDIR__HOST must be host:port, got {self.HOST!r}")
        if int(port) > 65535:
            raise ValueError(f"SR_REDIR__HOST port out of range: {port}")
        if host.startswith("[") and host.endswith("]"):
            host = host[1:-1]
        return host, int(port)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def environ_snapshot() -> dict[str, str]:
    """Copy the process environment once, for rule loading."""
    return dict(os.environ)
