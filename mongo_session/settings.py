from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def resolve(config: Optional[Mapping[str, Any]], key: str, default: Any) -> Any:
    """
    Value of ``key`` in ``config`` if set to something truthy, else ``default``.
    """
    if not config:
        return default
    return config.get(key) or default


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SESSION_STORE_", env_file=".env", extra="ignore")

    # MongoDB
    HOSTNAME: str = Field(default="localhost")
    PORT: int = Field(default=27017)
    DBNAME: str = Field(default="catalyst")
    COLLECTIONNAME: str = Field(default="session")

    # Upper bound for server selection; an unreachable server fails after this
    SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000)

    # Expiry sweeper
    SWEEP_INTERVAL_SECONDS: float = Field(default=300)

    LOG_LEVEL: str = Field(default="INFO")

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]] = None) -> "Settings":
        """
        Overlay a host configuration mapping (lowercase keys, as found in the
        session section of an app config) on top of env/defaults.
        """
        base = cls()
        return cls(
            HOSTNAME=resolve(config, "hostname", base.HOSTNAME),
            PORT=resolve(config, "port", base.PORT),
            DBNAME=resolve(config, "dbname", base.DBNAME),
            COLLECTIONNAME=resolve(config, "collectionname", base.COLLECTIONNAME),
            SERVER_SELECTION_TIMEOUT_MS=base.SERVER_SELECTION_TIMEOUT_MS,
            SWEEP_INTERVAL_SECONDS=base.SWEEP_INTERVAL_SECONDS,
            LOG_LEVEL=base.LOG_LEVEL,
        )

    @property
    def mongo_uri(self) -> str:
        return f"mongodb://{self.HOSTNAME}:{self.PORT}"


settings = Settings()
