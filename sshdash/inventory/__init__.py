"""Device-management inventory lookups."""

from .client import (
    ExtensionAttribute,
    InventoryClient,
    InventoryRecord,
    build_computer_url,
    parse_computer_document,
)
from .resolver import SENTINEL_VALUES, AlternateHostResolver, is_sentinel
from .results import (
    Absent,
    AlternateLookup,
    Found,
    LookupFailed,
    NotFound,
)

__all__ = [
    "Absent",
    "AlternateHostResolver",
    "AlternateLookup",
    "ExtensionAttribute",
    "Found",
    "InventoryClient",
    "InventoryRecord",
    "LookupFailed",
    "NotFound",
    "SENTINEL_VALUES",
    "build_computer_url",
    "is_sentinel",
    "parse_computer_document",
]
