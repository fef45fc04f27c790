"""Jamf Classic API client for computer records."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ElementTree
from typing import List, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .results import Absent, AttributeLookup, Found, LookupFailed, NotFound

logger = logging.getLogger(__name__)

COMPUTERS_RESOURCE = "JSSResource/computers"
DEFAULT_TIMEOUT = 15.0

_TAG_RE = re.compile(r"<[^>]*>")
_ATTRIBUTE_PATH = "extension_attributes/extension_attribute"


class ExtensionAttribute(BaseModel):
    """A named custom field on a computer record."""

    model_config = ConfigDict(frozen=True)
    name: str
    value: str


class InventoryRecord(BaseModel):
    """A computer record with its extension attributes in document order."""

    model_config = ConfigDict(frozen=True)
    computer_name: str
    extension_attributes: List[ExtensionAttribute] = Field(
        default_factory=list
    )

    def extension_attribute(self, name: str) -> AttributeLookup:
        """Return the first attribute value whose name matches exactly."""
        for attr in self.extension_attributes:
            if attr.name == name:
                return Found(value=attr.value)
        return Absent()


ComputerLookup = Union[InventoryRecord, NotFound, LookupFailed]


def build_computer_url(base_url: str, name: str) -> str:
    """Build the computer-by-name URL."""
    base = base_url.strip().rstrip("/")
    if "://" not in base:
        base = f"https://{base}"
    return f"{base}/{COMPUTERS_RESOURCE}/name/{quote(name, safe='')}"


def _embedded_error(body: str) -> str | None:
    """Find a human-readable error line in an HTML/text body."""
    for line in body.splitlines():
        text = _TAG_RE.sub("", line).strip()
        if "Error" in text:
            return text
    return None


def _text(element: ElementTree.Element | None) -> str:
    if element is None or element.text is None:
        return ""
    return element.text.strip()


def _first_value(attr: ElementTree.Element) -> str:
    # Multi-valued attributes repeat <value>; only the first is used.
    return _text(attr.find("value"))


def parse_computer_document(body: str, name: str) -> ComputerLookup:
    """Parse a computer document into an InventoryRecord.

    A body that is not XML, that fails to parse, or that carries an
    ``<error>`` element is a LookupFailed. A valid document without a
    ``<computer>`` element is a NotFound.
    """
    if not body.lstrip().startswith(("<?xml", "<computer")):
        reason = _embedded_error(body) or "Unknown Error"
        return LookupFailed(reason=reason)

    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as e:
        return LookupFailed(reason=f"Malformed inventory response: {e}")

    error = root if root.tag == "error" else root.find(".//error")
    if error is not None:
        return LookupFailed(reason=_text(error) or "Unknown Error")

    computer = root if root.tag == "computer" else root.find("computer")
    if computer is None:
        return NotFound(name=name)

    computer_name = _text(computer.find("general/name")) or name
    attributes = [
        ExtensionAttribute(
            name=_text(attr.find("name")),
            value=_first_value(attr),
        )
        for attr in computer.findall(_ATTRIBUTE_PATH)
    ]
    return InventoryRecord(
        computer_name=computer_name,
        extension_attributes=attributes,
    )


class InventoryClient:
    """Authenticated, stateless computer lookups.

    Every call performs exactly one request with a fresh HTTP client:
    no retries, no caching and no connection pooling.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.username = username
        self._password = password
        self.timeout = timeout
        self._transport = transport

    def fetch_computer(self, name: str) -> ComputerLookup:
        """Fetch a single computer record by name."""
        url = build_computer_url(self.base_url, name)
        logger.debug("Fetching inventory record from %s", url)
        try:
            with httpx.Client(
                auth=httpx.BasicAuth(self.username, self._password),
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/xml"},
                transport=self._transport,
            ) as client:
                response = client.get(url)
        except httpx.TimeoutException as e:
            logger.warning("Inventory lookup for %s timed out: %s", name, e)
            return LookupFailed(reason=f"Inventory request timed out: {e}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Inventory lookup for %s failed: %s", name, e)
            return LookupFailed(reason=f"Inventory request failed: {e}")

        if response.status_code == 404:
            logger.info("Inventory has no computer named %s", name)
            return NotFound(name=name)
        elif response.is_error:
            reason = _embedded_error(response.text) or (
                f"HTTP {response.status_code}"
            )
            logger.warning("Inventory lookup for %s failed: %s", name, reason)
            return LookupFailed(reason=reason)
        else:
            result = parse_computer_document(response.text, name)
            if isinstance(result, LookupFailed):
                logger.warning(
                    "Inventory lookup for %s failed: %s", name, result.reason
                )
            return result
