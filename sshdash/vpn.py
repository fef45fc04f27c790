"""VPN state detection.

Only the presence of a configured VPN and whether one is connected
are detected. Both degrade to False when the platform tools are
missing.
"""

from __future__ import annotations

import logging
import platform
import re
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_SCUTIL_VPN_RE = re.compile(r"PPP|VPN|L2TP|IPSEC|IKEV2", re.IGNORECASE)
_NMCLI_VPN_TYPES = {"vpn", "wireguard"}
_TUNNEL_PREFIXES = ("tun", "wg", "ppp", "ipsec", "utun")


class VpnState(Protocol):
    def is_vpn_active(self) -> bool: ...

    def has_vpn_interface_configured(self) -> bool: ...


def _run(args: list[str]) -> str | None:
    if shutil.which(args[0]) is None:
        return None
    try:
        result = subprocess.run(
            args, capture_output=True, text=True, timeout=5
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("%s failed: %s", args[0], e)
        return None
    if result.returncode != 0:
        return None
    else:
        return result.stdout


def parse_scutil_vpn_lines(output: str) -> list[str]:
    """Return the VPN service lines of ``scutil --nc list``."""
    return [
        line
        for line in output.splitlines()
        if _SCUTIL_VPN_RE.search(line)
    ]


def parse_nmcli_has_vpn(output: str) -> bool:
    """Check ``nmcli -t -f TYPE connection show`` for VPN connections."""
    return any(
        line.strip().lower() in _NMCLI_VPN_TYPES
        for line in output.splitlines()
    )


class SystemVpnState:
    """VPN state from scutil (macOS) or nmcli and sysfs (Linux)."""

    def __init__(self, sys_class_net: Path = Path("/sys/class/net")) -> None:
        self.system = platform.system()
        self.sys_class_net = sys_class_net

    def _scutil_lines(self) -> list[str]:
        output = _run(["scutil", "--nc", "list"])
        return parse_scutil_vpn_lines(output) if output else []

    def is_vpn_active(self) -> bool:
        if self.system == "Darwin":
            return any("(Connected)" in ln for ln in self._scutil_lines())
        try:
            names = [p.name for p in self.sys_class_net.iterdir()]
        except OSError:
            return False
        return any(n.startswith(_TUNNEL_PREFIXES) for n in names)

    def has_vpn_interface_configured(self) -> bool:
        if self.system == "Darwin":
            return bool(self._scutil_lines())
        output = _run(["nmcli", "-t", "-f", "TYPE", "connection", "show"])
        return parse_nmcli_has_vpn(output) if output else False
