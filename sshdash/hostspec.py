"""Parsing of ``[user@]host[:port]`` tokens."""

from __future__ import annotations

import ipaddress
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SSH_PORT = 22

_HOST_SPEC_RE = re.compile(r"^(?:([^@:]+)@)?([^:]+)(?::([0-9]+))?$")


class HostSpec(BaseModel):
    """A parsed host token."""

    model_config = ConfigDict(frozen=True)
    raw_input: str
    user: Optional[str] = None
    host: str = Field(..., min_length=1)
    port: Optional[int] = None
    inferred_domain: Optional[str] = None

    def effective_port(self, default: int = DEFAULT_SSH_PORT) -> int:
        """The token port, else *default*."""
        return self.port if self.port is not None else default

    @property
    def is_dotted(self) -> bool:
        return "." in self.host


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def infer_domain(host: str) -> str | None:
    """Infer a domain from a dotted hostname.

    ``web.prod.example.com`` gives ``prod.example.com``. Single
    labels and literal IP addresses have no domain.
    """
    if _is_ip_address(host):
        return None
    _, sep, rest = host.partition(".")
    if not sep or not rest:
        return None
    else:
        return rest


def parse_host_spec(token: str) -> HostSpec:
    """Parse a ``[user@]host[:port]`` token.

    Parsing is best effort: when the token does not match the
    pattern, the whole token is used as the host and every
    optional field is left empty.
    """
    raw = token.strip()
    if not raw:
        raise ValueError("Host token must not be empty")

    m = _HOST_SPEC_RE.match(raw)
    if m is None:
        return HostSpec(raw_input=token, host=raw)

    user, host, port = m.group(1), m.group(2), m.group(3)
    port_num = int(port) if port is not None else None
    if port_num is not None and not 1 <= port_num <= 65535:
        return HostSpec(raw_input=token, host=raw)

    return HostSpec(
        raw_input=token,
        user=user,
        host=host,
        port=port_num,
        inferred_domain=infer_domain(host),
    )
