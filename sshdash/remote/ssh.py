"""SSH command building and interactive session helpers."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class SshTarget(BaseModel):
    """A resolved host plus the connection details to reach it."""

    model_config = ConfigDict(frozen=True)
    host: str = Field(..., min_length=1)
    port: int = Field(default=22, ge=1, le=65535)
    user: Optional[str] = None
    key: Optional[str] = None


def format_destination(target: SshTarget) -> str:
    """Format a target as [user@]host."""
    return f"{target.user}@{target.host}" if target.user else target.host


def _ssh_options(target: SshTarget) -> list[str]:
    args: list[str] = []
    if target.port != 22:
        args.extend(["-p", str(target.port)])
    if target.key:
        args.extend(["-i", target.key])
    return args


def build_session_args(target: SshTarget) -> list[str]:
    """Build the interactive ssh command line.

    Returns args like:
        ssh [-p port] [-i key] user@host
    """
    return ["ssh", *_ssh_options(target), format_destination(target)]


def build_copy_id_args(target: SshTarget) -> list[str]:
    """Build the ssh-copy-id command line."""
    args = ["ssh-copy-id"]
    if target.key:
        args.extend(["-i", target.key])
    if target.port != 22:
        args.extend(["-p", str(target.port)])
    args.append(format_destination(target))
    return args


def build_ssh_e_option(target: SshTarget) -> list[str]:
    """Build rsync's -e option for SSH with custom port/key.

    Returns a list like: ["-e", "ssh -p 5022 -i ~/.ssh/key"]
    """
    return ["-e", " ".join(["ssh", *_ssh_options(target)])]


def format_remote_path(target: SshTarget, path: str) -> str:
    """Format a remote path as [user@]host:path."""
    return f"{format_destination(target)}:{path}"


def launch_session(target: SshTarget) -> int:
    """Run an interactive ssh session attached to this terminal."""
    args = build_session_args(target)
    logger.info("Running %s", " ".join(args))
    return subprocess.run(args).returncode


def install_identity(target: SshTarget) -> int:
    """Copy the local identity to the remote host.

    ssh-copy-id prompts for the remote password on this terminal.
    """
    args = build_copy_id_args(target)
    logger.info("Running %s", " ".join(args))
    return subprocess.run(args).returncode
