"""FastAPI integration for the Bloom filter service.

A :class:`BloomFilterModule` owns one :class:`BloomFilterService` and exposes it
as a FastAPI dependency.

Usage:
    bloom = BloomFilterModule.register(BloomFilterOptions.from_connection(port=6379))
    app = FastAPI(lifespan=bloom.lifespan)

    @app.get("/seen/{item}")
    async def seen(item: str, service: BloomFilterService = Depends(bloom.get_service)):
        return {"seen": await service.exists("visitors", item)}
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Protocol, Union

from .config import BloomFilterOptions
from .connection import RedisConnectionProvider
from .service import BloomFilterService

logger = logging.getLogger(__name__)

OptionsLike = Union[BloomFilterOptions, Mapping[str, Any]]
OptionsFactory = Callable[[], Union[OptionsLike, Awaitable[OptionsLike]]]


class BloomFilterOptionsFactory(Protocol):
    def create_bloom_filter_options(self) -> OptionsLike | Awaitable[OptionsLike]: ...


class BloomFilterModule:
    """Holds the process-wide service instance and its connection."""

    def __init__(self, options_factory: OptionsFactory) -> None:
        self._options_factory = options_factory
        self._service: BloomFilterService | None = None
        self._lock = asyncio.Lock()

    @classmethod
    def register(cls, options: OptionsLike) -> "BloomFilterModule":
        """Register with static options, validated immediately."""
        module = cls(lambda: options)
        module._service = BloomFilterService(RedisConnectionProvider(options))
        return module

    @classmethod
    def register_async(
        cls,
        use_factory: OptionsFactory | None = None,
        use_class: type[BloomFilterOptionsFactory] | None = None,
        use_existing: BloomFilterOptionsFactory | None = None,
    ) -> "BloomFilterModule":
        """Register with options produced on first use.

        Exactly one of ``use_factory`` (a sync or async callable),
        ``use_class`` (instantiated without arguments) or ``use_existing``
        (an options factory instance) must be given.
        """
        given = [arg for arg in (use_factory, use_class, use_existing) if arg is not None]
        if len(given) != 1:
            raise ValueError("Exactly one of use_factory, use_class or use_existing is required")

        if use_factory is not None:
            return cls(use_factory)
        factory = use_existing if use_existing is not None else use_class()  # type: ignore[misc]
        return cls(factory.create_bloom_filter_options)

    async def get_service(self) -> BloomFilterService:
        """FastAPI dependency returning the shared service."""
        if self._service is None:
            async with self._lock:
                if self._service is None:
                    options = self._options_factory()
                    if inspect.isawaitable(options):
                        options = await options
                    self._service = BloomFilterService(RedisConnectionProvider(options))
                    logger.info("Bloom filter service initialized")
        return self._service

    async def close(self) -> None:
        service, self._service = self._service, None
        if service is not None:
            await service.provider.close()

    @asynccontextmanager
    async def lifespan(self, app: Any) -> AsyncIterator[None]:
        """FastAPI lifespan that resolves the service at startup and closes it at shutdown."""
        await self.get_service()
        try:
            yield
        finally:
            await self.close()
