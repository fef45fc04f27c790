"""Alternate host discovery through inventory extension attributes."""

from __future__ import annotations

import logging

from .client import InventoryClient, InventoryRecord
from .results import Absent, AlternateLookup, Found, LookupFailed, NotFound

logger = logging.getLogger(__name__)

SENTINEL_VALUES = frozenset({"none", "false", "0", ""})


def is_sentinel(value: str | None) -> bool:
    """Return True if an inventory value means "no value"."""
    if value is None:
        return True
    return value.strip().lower() in SENTINEL_VALUES


class AlternateHostResolver:
    """Pick an alternate address for a host from its inventory record.

    The VPN-assigned address is preferred over the registered FQDN.
    """

    def __init__(
        self,
        client: InventoryClient,
        vpn_attribute: str | None = None,
        fqdn_attribute: str | None = None,
    ) -> None:
        self.client = client
        self.vpn_attribute = vpn_attribute
        self.fqdn_attribute = fqdn_attribute

    @property
    def candidate_attributes(self) -> list[str]:
        return [
            name
            for name in (self.vpn_attribute, self.fqdn_attribute)
            if name
        ]

    def resolve(self, host: str) -> AlternateLookup:
        """Resolve an alternate address for *host*."""
        attributes = self.candidate_attributes
        if not attributes:
            logger.info("No inventory extension attributes configured")
            return Absent()

        match self.client.fetch_computer(host):
            case LookupFailed() as failed:
                return failed
            case NotFound():
                return Absent()
            case InventoryRecord() as record:
                return _first_usable(record, attributes)


def _first_usable(
    record: InventoryRecord, attributes: list[str]
) -> AlternateLookup:
    for name in attributes:
        match record.extension_attribute(name):
            case Found(value=value) if not is_sentinel(value):
                logger.info(
                    "Alternate for %s from '%s': %s",
                    record.computer_name,
                    name,
                    value,
                )
                return Found(value=value.strip())
            case _:
                logger.debug(
                    "No usable '%s' for %s", name, record.computer_name
                )
    return Absent()
