"""Value types shared by the Bloom filter service."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

FilterKey = str
FilterItem = str


class InfoAttribute(str, Enum):
    """Single attribute names accepted by ``BF.INFO``."""

    CAPACITY = "CAPACITY"
    SIZE = "SIZE"
    FILTERS = "FILTERS"
    ITEMS = "ITEMS"
    EXPANSION = "EXPANSION"


class InsertFlag(str, Enum):
    """Behavioral flags accepted by ``BF.INSERT``."""

    NOCREATE = "NOCREATE"  # Do not create the filter if it is missing
    NONSCALING = "NONSCALING"  # Refuse to grow once the capacity is reached


class InfoField(str, Enum):
    """Normalized keys of the mapping returned by a full ``BF.INFO``."""

    CAPACITY = "CAPACITY"
    SIZE = "SIZE"
    NUMBER_OF_FILTERS = "NUMBER_OF_FILTERS"
    NUMBER_OF_ITEMS = "NUMBER_OF_ITEMS"
    EXPANSION_RATE = "EXPANSION_RATE"


# Raw labels as reported by the module, lower-cased
INFO_LABELS: dict[str, InfoField] = {
    "capacity": InfoField.CAPACITY,
    "size": InfoField.SIZE,
    "number of filters": InfoField.NUMBER_OF_FILTERS,
    "number of items inserted": InfoField.NUMBER_OF_ITEMS,
    "expansion rate": InfoField.EXPANSION_RATE,
}


class ScanChunk(NamedTuple):
    """One step of an incremental ``BF.SCANDUMP`` / ``BF.LOADCHUNK`` transfer.

    An iterator of 0 marks the end of the dump; the matching payload is empty.
    """

    iterator: int
    data: bytes

    @property
    def is_last(self) -> bool:
        return self.iterator == 0
