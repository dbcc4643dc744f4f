"""Bloom filter commands executed against the RedisBloom module.

Each method builds the positional arguments of one ``BF.*`` command, sends it
over the shared connection and maps the reply to a typed value. Failures
reported by Redis are re-raised as the exceptions in
:mod:`redis_bloom_service.exceptions`.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Sequence

from redis.client import NEVER_DECODE
from redis.exceptions import RedisError

from .connection import RedisConnectionProvider
from .exceptions import classify_error
from .replies import as_flag, as_int, as_int_list, as_ok, parse_info
from .types import FilterItem, FilterKey, InfoAttribute, InsertFlag, ScanChunk

logger = logging.getLogger(__name__)

DEFAULT_EXPANSION = 2


class BloomFilterService:
    """Stateless facade over the ``BF.*`` command family.

    Args:
        provider: Supplies the shared Redis handle. All calls go through it,
            so concurrent callers share one connection pool.
    """

    def __init__(self, provider: RedisConnectionProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> RedisConnectionProvider:
        return self._provider

    async def _call(self, command: str, key: FilterKey, *args: Any, **options: Any) -> Any:
        logger.debug("%s %s (%d args)", command, key, len(args))
        try:
            return await self._provider.get_client().execute_command(
                command, key, *args, **options
            )
        except RedisError as e:
            raise classify_error(e, key) from e

    async def add(self, key: FilterKey, item: FilterItem) -> bool:
        """Add an item, creating the filter with default parameters if needed.

        Returns:
            True if the item was newly added, False if it may have existed.

        Raises:
            NonScalingFilterIsFull: If the filter cannot take more items.
        """
        return as_flag(await self._call("BF.ADD", key, item))

    async def card(self, key: FilterKey) -> int:
        """Number of items added to the filter (0 if the key does not exist)."""
        return as_int(await self._call("BF.CARD", key))

    async def exists(self, key: FilterKey, item: FilterItem) -> bool:
        return as_flag(await self._call("BF.EXISTS", key, item))

    async def info(
        self, key: FilterKey, attribute: InfoAttribute | str | None = None
    ) -> dict[str, Any] | int:
        """Describe a filter.

        Returns:
            The integer value of ``attribute`` when one is given, otherwise a
            mapping keyed by :class:`InfoField` names.
        """
        if attribute:
            if not isinstance(attribute, InfoAttribute):
                attribute = InfoAttribute(attribute.upper())
            return as_int(await self._call("BF.INFO", key, attribute.value))
        return parse_info(await self._call("BF.INFO", key))

    async def insert(
        self,
        key: FilterKey,
        items: Sequence[FilterItem],
        capacity: int | None = None,
        error_rate: float | None = None,
        expansion: int | None = None,
        flags: Iterable[InsertFlag | str] | None = None,
    ) -> list[int]:
        """Add items, creating the filter with the given parameters if needed.

        Flags and items each travel as one space-joined argument.
        """
        args: list[Any] = []
        if capacity is not None:
            args.extend(["CAPACITY", str(capacity)])
        if error_rate is not None:
            args.extend(["ERROR", str(error_rate)])
        if expansion is not None:
            args.extend(["EXPANSION", str(expansion)])
        if flags:
            args.append(" ".join(InsertFlag(flag).value for flag in flags))
        args.extend(["ITEMS", " ".join(items)])
        return as_int_list(await self._call("BF.INSERT", key, *args), key)

    async def load_chunk(self, key: FilterKey, iterator: int, data: bytes) -> bool:
        """Restore one chunk produced by :meth:`scan_dump`."""
        return as_ok(await self._call("BF.LOADCHUNK", key, iterator, bytes(data)))

    async def madd(self, key: FilterKey, items: Sequence[FilterItem]) -> list[int]:
        return as_int_list(await self._call("BF.MADD", key, *items), key)

    async def mexists(self, key: FilterKey, items: Sequence[FilterItem]) -> list[int]:
        return as_int_list(await self._call("BF.MEXISTS", key, *items), key)

    async def reserve(
        self,
        key: FilterKey,
        error_rate: float,
        capacity: int,
        expansion: int | None = DEFAULT_EXPANSION,
    ) -> bool:
        """Create an empty filter.

        A positive ``expansion`` creates a scaling filter growing by that
        factor; zero, a negative value or None creates a non-scaling filter.

        Raises:
            FilterAlreadyExists: If the key is already taken.
        """
        args: list[Any] = [error_rate, capacity]
        if expansion is not None and expansion > 0:
            args.extend(["EXPANSION", expansion])
        else:
            args.append("NONSCALING")
        return as_ok(await self._call("BF.RESERVE", key, *args))

    async def scan_dump(self, key: FilterKey, iterator: int) -> ScanChunk:
        """Export the next chunk of a filter, starting with iterator 0.

        The returned chunk has iterator 0 and an empty payload once the dump
        is complete.
        """
        reply = await self._call("BF.SCANDUMP", key, iterator, **{NEVER_DECODE: []})
        next_iterator, data = reply
        return ScanChunk(as_int(next_iterator), bytes(data or b""))

    async def dump(self, key: FilterKey) -> AsyncIterator[ScanChunk]:
        """Yield every chunk of a filter until the dump is complete."""
        chunk = await self.scan_dump(key, 0)
        while not chunk.is_last:
            yield chunk
            chunk = await self.scan_dump(key, chunk.iterator)

    async def restore(
        self, key: FilterKey, chunks: Iterable[ScanChunk] | AsyncIterable[ScanChunk]
    ) -> int:
        """Load chunks produced by :meth:`dump`; returns how many were accepted.

        ``chunks`` may be a list or the async iterator returned by :meth:`dump`.
        """
        loaded = 0
        if hasattr(chunks, "__aiter__"):
            async for chunk in chunks:  # type: ignore[union-attr]
                if chunk.is_last:
                    break
                if await self.load_chunk(key, chunk.iterator, chunk.data):
                    loaded += 1
            return loaded

        for chunk in chunks:  # type: ignore[union-attr]
            if chunk.is_last:
                break
            if await self.load_chunk(key, chunk.iterator, chunk.data):
                loaded += 1
        return loaded

    async def ping(self) -> bool:
        return await self._provider.ping()
