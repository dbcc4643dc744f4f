"""Shared Redis connection management."""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Any, Mapping

from redis.exceptions import RedisError

from .config import BloomFilterOptions, ConnectionMode
from .exceptions import BloomFilterConfigurationError
from .replies import as_text

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class RedisConnectionProvider:
    """Resolve the single Redis handle shared by every Bloom filter command.

    A handle passed in through the options is used as-is and never closed
    here. Otherwise the handle is built from the connection parameters the
    first time it is needed, and rebuilt if the process has been forked.

    Usage:
        provider = RedisConnectionProvider(BloomFilterOptions.from_connection(port=6379))
        redis = provider.get_client()
        ...
        await provider.close()
    """

    def __init__(self, options: BloomFilterOptions | Mapping[str, Any] | None) -> None:
        if not isinstance(options, BloomFilterOptions):
            options = BloomFilterOptions.from_mapping(options)
        self._options = options
        self._lock = threading.Lock()
        self._client: "Redis | None" = None
        self._pid: int | None = None

    @property
    def options(self) -> BloomFilterOptions:
        return self._options

    @property
    def owns_client(self) -> bool:
        """Whether the handle is built (and closed) by this provider."""
        return self._options.mode == ConnectionMode.CONNECTION

    def get_client(self) -> "Redis":
        if not self.owns_client:
            return self._options.client  # type: ignore[return-value]

        current_pid = os.getpid()
        if self._client is None or self._pid != current_pid:
            with self._lock:
                if self._client is None or self._pid != current_pid:
                    # A handle inherited from the parent process is dropped, not closed
                    self._client = self._create_client()
                    self._pid = current_pid
        return self._client

    def _create_client(self) -> "Redis":
        from redis.asyncio import Redis

        connection = self._options.connection
        if connection is None:
            raise BloomFilterConfigurationError("No connection parameters configured")
        if connection.url:
            logger.debug("Creating Redis client from URL")
            return Redis.from_url(connection.url, decode_responses=True)

        logger.debug("Creating Redis client for %s:%s", connection.host, connection.port)
        return Redis(
            host=connection.host,
            port=connection.port,
            username=connection.username,
            password=connection.password,
            db=connection.db or 0,
            decode_responses=True,
        )

    async def ping(self) -> bool:
        """Return True only when the server acknowledges with ``PONG``."""
        try:
            reply = await self.get_client().ping()
        except RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False
        return reply is True or as_text(reply) == "PONG"

    async def close(self) -> None:
        """Close a handle built by this provider."""
        with self._lock:
            client = self._client
            self._client = None
            self._pid = None
        if client is not None:
            await client.aclose()
