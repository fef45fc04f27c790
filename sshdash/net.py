"""TCP and ICMP reachability probes.

Every probe fails closed: timeouts, refusals, DNS failures and
missing tools all read as "unreachable" and never raise.
"""

from __future__ import annotations

import logging
import platform
import re
import socket
import subprocess
from typing import Callable, Iterable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

SSH_PORT = 22
TCP_TIMEOUT = 5.0
ICMP_TIMEOUT = 1.0

_LOSS_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)% packet loss")
_RECEIVED_RE = re.compile(r"([0-9]+) (?:packets )?received")


class ProbeResult(BaseModel):
    """Outcome of probing one target."""

    model_config = ConfigDict(frozen=True)
    target: str
    reachable_tcp22: bool
    reachable_icmp: bool = False


def tcp_probe(
    host: str, port: int = SSH_PORT, timeout: float = TCP_TIMEOUT
) -> bool:
    """Return True if a TCP connection to host:port succeeds."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except OSError as e:
        logger.debug("TCP probe %s:%d failed: %s", host, port, e)
        return False
    logger.debug("TCP probe %s:%d succeeded", host, port)
    return True


def build_ping_args(
    host: str, count: int = 1, timeout: float = ICMP_TIMEOUT
) -> list[str]:
    """Build the system ping command line.

    macOS takes ``-W`` in milliseconds, Linux in seconds.
    """
    if platform.system() == "Darwin":
        wait = str(max(1, int(timeout * 1000)))
    else:
        wait = str(max(1, int(round(timeout))))
    return ["ping", "-c", str(count), "-W", wait, host]


def parse_ping_output(output: str) -> bool:
    """Interpret ping's summary line.

    Reachable only when packet loss is below 100% and at least one
    packet was received.
    """
    loss = _LOSS_RE.search(output)
    received = _RECEIVED_RE.search(output)
    if loss is None or received is None:
        return False
    else:
        return float(loss.group(1)) < 100.0 and int(received.group(1)) > 0


def icmp_probe(
    host: str, count: int = 1, timeout: float = ICMP_TIMEOUT
) -> bool:
    """Return True if host answers an ICMP echo request."""
    args = build_ping_args(host, count, timeout)
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout * count + 2,
        )
    except subprocess.TimeoutExpired:
        logger.debug("ICMP probe %s timed out", host)
        return False
    except OSError as e:
        logger.debug("ICMP probe %s could not run ping: %s", host, e)
        return False
    reachable = parse_ping_output(result.stdout)
    logger.debug(
        "ICMP probe %s: %s", host, "reachable" if reachable else "unreachable"
    )
    return reachable


def any_reachable(
    targets: Iterable[str],
    probe: Callable[[str], bool] = icmp_probe,
) -> bool:
    """Return True if any target is reachable, in the given order.

    Stops at the first reachable target. An empty sequence is
    vacuously reachable.
    """
    seen = False
    for target in targets:
        seen = True
        if probe(target):
            return True
    return not seen


def probe_host(
    target: str,
    *,
    icmp: bool = False,
    tcp_check: Callable[[str], bool] = tcp_probe,
    icmp_check: Callable[[str], bool] = icmp_probe,
) -> ProbeResult:
    """Probe TCP 22 on *target*, and ICMP too when *icmp* is set."""
    return ProbeResult(
        target=target,
        reachable_tcp22=tcp_check(target),
        reachable_icmp=icmp_check(target) if icmp else False,
    )
