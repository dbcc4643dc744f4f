"""Async client service for the RedisBloom ``BF.*`` commands."""

from __future__ import annotations

from .config import BloomFilterOptions, ConnectionConfig, ConnectionMode
from .connection import RedisConnectionProvider
from .exceptions import (
    BloomFilterConfigurationError,
    BloomFilterException,
    FilterAlreadyExists,
    NonScalingFilterIsFull,
    UnknownFilterException,
)
from .module import BloomFilterModule, BloomFilterOptionsFactory
from .service import BloomFilterService
from .types import FilterItem, FilterKey, InfoAttribute, InfoField, InsertFlag, ScanChunk


__all__ = [
    "BloomFilterConfigurationError",
    "BloomFilterException",
    "BloomFilterModule",
    "BloomFilterOptions",
    "BloomFilterOptionsFactory",
    "BloomFilterService",
    "ConnectionConfig",
    "ConnectionMode",
    "FilterAlreadyExists",
    "FilterItem",
    "FilterKey",
    "InfoAttribute",
    "InfoField",
    "InsertFlag",
    "NonScalingFilterIsFull",
    "RedisConnectionProvider",
    "ScanChunk",
    "UnknownFilterException",
]
