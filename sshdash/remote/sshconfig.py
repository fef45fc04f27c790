"""Lookup and registration of hosts in the user's SSH config."""

from __future__ import annotations

import logging
from pathlib import Path

import paramiko  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


def default_ssh_config_path() -> Path:
    return Path.home() / ".ssh" / "config"


def format_host_block(
    alias: str, fqdn: str, port: int, user: str | None
) -> str:
    """Format a ``Host`` block for appending to an SSH config."""
    lines = [
        f"Host {alias}",
        f"    HostName {fqdn}",
        f"    Port {port}",
    ]
    if user:
        lines.append(f"    User {user}")
    return "\n".join(lines) + "\n"


class SshConfigStore:
    """The user's SSH config file (``~/.ssh/config`` by default)."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else default_ssh_config_path()

    def _load(self) -> paramiko.SSHConfig | None:
        """Load the SSH config.

        Returns None when the file is missing, unreadable or unparsable.
        """
        if not self.path.exists():
            return None
        try:
            return paramiko.SSHConfig.from_path(str(self.path))
        except (paramiko.ssh_exception.ConfigParseError, OSError) as e:
            logger.warning("Could not read %s: %s", self.path, e)
            return None

    def lookup(self, alias: str) -> str | None:
        """Resolve an alias through the SSH config.

        Returns the configured HostName, or ``None`` when the file is
        missing or no block maps the alias to another hostname.
        """
        ssh_config = self._load()
        if ssh_config is None:
            return None
        hostname = ssh_config.lookup(alias).get("hostname")
        if not hostname or hostname == alias:
            return None
        else:
            logger.debug("SSH config maps %s to %s", alias, hostname)
            return hostname

    def has_entry(self, alias: str) -> bool:
        """Return True if a ``Host`` block names exactly this alias."""
        ssh_config = self._load()
        if ssh_config is None:
            return False
        else:
            return alias in ssh_config.get_hostnames()

    def append_entry(
        self,
        alias: str,
        fqdn: str,
        port: int = 22,
        user: str | None = None,
    ) -> bool:
        """Append a Host block for *alias*.

        Returns False without writing when the alias already has an
        entry, or when the file cannot be read, parsed or written.
        """
        ssh_config = self._load()
        if ssh_config is None and self.path.exists():
            logger.warning(
                "Not adding %s: %s could not be read", alias, self.path
            )
            return False
        if ssh_config is not None and alias in ssh_config.get_hostnames():
            logger.info("SSH config already has an entry for %s", alias)
            return False

        block = format_host_block(alias, fqdn, port, user)
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            existing = self.path.read_text() if self.path.exists() else ""
            if not existing:
                separator = ""
            elif existing.endswith("\n"):
                separator = "\n"
            else:
                separator = "\n\n"
            with open(self.path, "a") as f:
                f.write(separator + block)
        except OSError as e:
            logger.warning("Could not write %s: %s", self.path, e)
            return False
        logger.info("Added %s (%s) to %s", alias, fqdn, self.path)
        return True
