"""Connection options for the Bloom filter service.

Options come in exactly one of two shapes:
- provided_client: an already built ``redis.asyncio.Redis`` handle
- connection: host/port/credentials used to build a handle lazily

Environment variables (read by ``BloomFilterOptions.from_env``):
- BLOOM_FILTER_REDIS_URL: Redis connection URL (takes precedence)
- BLOOM_FILTER_REDIS_HOST / BLOOM_FILTER_REDIS_PORT
- BLOOM_FILTER_REDIS_USERNAME / BLOOM_FILTER_REDIS_PASSWORD
- BLOOM_FILTER_REDIS_DB
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping

from .exceptions import BloomFilterConfigurationError

if TYPE_CHECKING:
    from redis.asyncio import Redis

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379

ENV_PREFIX = "BLOOM_FILTER_REDIS_"


class ConnectionMode(str, Enum):
    """How the Redis handle is obtained."""

    PROVIDED_CLIENT = "provided_client"  # Use a handle built by the caller
    CONNECTION = "connection"  # Build a handle from connection parameters


@dataclass
class ConnectionConfig:
    """Parameters used to build a Redis handle.

    Attributes:
        host: Redis server host
        port: Redis server port
        username: Optional ACL user name
        password: Optional password
        db: Optional database index
        url: Optional Redis URL; when set it replaces the fields above
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: str | None = None
    password: str | None = None
    db: int | None = None
    url: str | None = None


@dataclass
class BloomFilterOptions:
    """Resolved options, tagged by ``mode``."""

    mode: ConnectionMode
    client: "Redis | None" = None
    connection: ConnectionConfig | None = None

    def __post_init__(self) -> None:
        if self.mode == ConnectionMode.PROVIDED_CLIENT and self.client is None:
            raise BloomFilterConfigurationError("A provided client is required in client mode")
        if self.mode == ConnectionMode.CONNECTION and self.connection is None:
            raise BloomFilterConfigurationError(
                "Connection parameters are required in connection mode"
            )

    @classmethod
    def from_client(cls, client: "Redis") -> "BloomFilterOptions":
        """Use a handle created and owned by the caller."""
        return cls(mode=ConnectionMode.PROVIDED_CLIENT, client=client)

    @classmethod
    def from_connection(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        username: str | None = None,
        password: str | None = None,
        db: int | None = None,
    ) -> "BloomFilterOptions":
        """Build the handle lazily from connection parameters."""
        return cls(
            mode=ConnectionMode.CONNECTION,
            connection=ConnectionConfig(
                host=host, port=port, username=username, password=password, db=db
            ),
        )

    @classmethod
    def from_redis_url(cls, url: str) -> "BloomFilterOptions":
        """Build the handle lazily from a URL such as ``redis://localhost:6379/0``."""
        return cls(mode=ConnectionMode.CONNECTION, connection=ConnectionConfig(url=url))

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "BloomFilterOptions":
        """Resolve ``{"client": ...}`` or ``{"connection": {...}}``.

        A client takes precedence over connection parameters.

        Raises:
            BloomFilterConfigurationError: If neither is supplied.
        """
        options = options or {}
        client = options.get("client")
        if client is not None:
            return cls.from_client(client)

        connection = options.get("connection")
        if connection is None:
            raise BloomFilterConfigurationError(
                "Bloom filter options require either a 'client' or 'connection' entry"
            )
        if isinstance(connection, ConnectionConfig):
            return cls(mode=ConnectionMode.CONNECTION, connection=connection)
        if "url" in connection:
            return cls.from_redis_url(connection["url"])
        return cls.from_connection(
            host=connection.get("host") or DEFAULT_HOST,
            port=int(connection.get("port") or DEFAULT_PORT),
            username=connection.get("username"),
            password=connection.get("password"),
            db=int(connection["db"]) if connection.get("db") is not None else None,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BloomFilterOptions":
        """Read connection options from ``BLOOM_FILTER_REDIS_*`` variables.

        Raises:
            BloomFilterConfigurationError: If no variable is set.
        """
        env = os.environ if environ is None else environ

        url = env.get(f"{ENV_PREFIX}URL")
        if url:
            return cls.from_redis_url(url)

        host = env.get(f"{ENV_PREFIX}HOST")
        port = env.get(f"{ENV_PREFIX}PORT")
        if not host and not port:
            raise BloomFilterConfigurationError(
                f"Set {ENV_PREFIX}URL or {ENV_PREFIX}HOST to configure the Bloom filter service"
            )
        db = env.get(f"{ENV_PREFIX}DB")
        return cls.from_connection(
            host=host or DEFAULT_HOST,
            port=int(port) if port else DEFAULT_PORT,
            username=env.get(f"{ENV_PREFIX}USERNAME") or None,
            password=env.get(f"{ENV_PREFIX}PASSWORD") or None,
            db=int(db) if db else None,
        )
