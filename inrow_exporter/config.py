from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Tuple


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # HTTP server
    LISTEN_ADDRESS: str = Field(":9335", description="Address on which to expose metrics (host:port)")
    METRICS_PATH: str = Field("/metrics", description="Path under which to expose metrics")

    # SNMP
    SNMP_TARGETS: str = Field("", description="Comma-separated list of InRow units to scrape")
    SNMP_COMMUNITY: str = Field("", description="SNMP v2c community")
    SNMP_PORT: int = Field(161, ge=1, le=65535, description="SNMP port of the InRow units")
    SNMP_TIMEOUT: int = Field(2, ge=1, description="SNMP session timeout in seconds")
    SNMP_RETRIES: int = Field(0, ge=0, description="SNMP retries per request")
    SNMP_MAX_WORKERS: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum number of targets polled in parallel. Unset polls every target at once."
    )

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Logging level")

    @field_validator("METRICS_PATH")
    @classmethod
    def _metrics_path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"metrics path must start with '/', got {value!r}")
        if value == "/":
            raise ValueError("metrics path cannot be '/', it serves the landing page")
        return value

    @field_validator("LISTEN_ADDRESS")
    @classmethod
    def _listen_address_has_port(cls, value: str) -> str:
        _split_listen_address(value)
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _log_level_upper(cls, value: str) -> str:
        return value.upper()

    @property
    def target_list(self) -> List[str]:
        """Configured targets, stripped, without empty entries or duplicates."""
        targets = [t.strip() for t in self.SNMP_TARGETS.split(",") if t.strip()]
        return list(dict.fromkeys(targets))

    @property
    def bind_host(self) -> str:
        return _split_listen_address(self.LISTEN_ADDRESS)[0]

    @property
    def bind_port(self) -> int:
        return _split_listen_address(self.LISTEN_ADDRESS)[1]


def _split_listen_address(address: str) -> Tuple[str, int]:
    """
    Split a Go-style listen address into host and port.

    ":9335" binds every interface, "[::1]:9335" is an IPv6 literal.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"listen address must be host:port, got {address!r}")
    port_number = int(port)
    if not 1 <= port_number <= 65535:
        raise ValueError(f"listen port out of range: {port_number}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port_number


@lru_cache
def get_default_settings() -> Settings:
    """Process settings from the environment and .env, built on first use."""
    return Settings()
