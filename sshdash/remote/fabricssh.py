"""Fabric-based remote command execution."""

from __future__ import annotations

import logging

import paramiko  # type: ignore[import-untyped]
from fabric import Connection  # type: ignore[import-untyped]

from .ssh import SshTarget

logger = logging.getLogger(__name__)

KEY_CHECK_TIMEOUT = 10


def _build_connection(target: SshTarget) -> Connection:
    """Build a Fabric Connection that only tries public keys."""
    connect_kwargs: dict[str, object] = {
        "allow_agent": True,
        "look_for_keys": True,
    }
    if target.key:
        connect_kwargs["key_filename"] = target.key

    conn = Connection(
        host=target.host,
        port=target.port,
        user=target.user,
        connect_kwargs=connect_kwargs,
        connect_timeout=KEY_CHECK_TIMEOUT,
    )
    conn.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    return conn


def is_key_installed(target: SshTarget) -> bool:
    """Return True if public key login as ``target.user`` works.

    Runs ``whoami`` on the remote host and compares the answer with
    the expected user.
    """
    try:
        with _build_connection(target) as conn:
            result = conn.run("whoami", warn=True, hide=True, in_stream=False)
    except (paramiko.SSHException, OSError) as e:
        logger.info("Public key login to %s failed: %s", target.host, e)
        return False
    who = result.stdout.strip()
    expected = target.user or who
    logger.debug("Remote whoami on %s: %r", target.host, who)
    return result.exited == 0 and bool(who) and who == expected
