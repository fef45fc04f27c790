"""Dotfile synchronization to the remote home directory via rsync."""

from __future__ import annotations

import enum
import logging
import subprocess
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .remote import SshTarget, build_ssh_e_option, format_remote_path

logger = logging.getLogger(__name__)

_RSYNC_OPTIONS: list[str] = [
    "--exclude",
    ".git/",
    "--exclude",
    ".idea/",
    "-a",
    "-i",
    "--no-perms",
]


class DotfilesStatus(str, enum.Enum):
    UP_TO_DATE = "up-to-date"
    UPDATED = "updated"
    FAILED = "failed"


class DotfilesResult(BaseModel):
    status: DotfilesStatus
    changed: list[str] = Field(default_factory=list)
    error: Optional[str] = None


def resolve_dotfiles_dir(path: str | None) -> Path | None:
    """Return the dotfiles directory, or None when unset or missing."""
    if not path:
        return None
    p = Path(path).expanduser()
    if p.is_dir():
        return p
    else:
        logger.warning("Dotfiles directory %s does not exist", p)
        return None


def list_dotfiles(source: Path) -> list[Path]:
    """Hidden entries of *source*, as the shell glob ``.??*`` selects."""
    return sorted(source.glob(".??*"))


def build_rsync_command(
    sources: list[Path], target: SshTarget, dry_run: bool = False
) -> list[str]:
    """Build the rsync command that copies *sources* to the remote home."""
    args = ["rsync", *_RSYNC_OPTIONS]
    if dry_run:
        args.append("--dry-run")
    args.extend(build_ssh_e_option(target))
    args.extend(str(s) for s in sources)
    args.append(format_remote_path(target, ""))
    return args


def parse_itemized_changes(output: str) -> list[str]:
    """Extract file names from ``rsync -i`` itemized output."""
    changed: list[str] = []
    for line in output.splitlines():
        parts = line.split(" ", 1)
        if len(parts) == 2 and parts[1].strip():
            changed.append(parts[1].strip())
    return changed


def sync_dotfiles(source: Path, target: SshTarget) -> DotfilesResult:
    """Sync dotfiles, skipping the real run when a dry run finds nothing."""
    sources = list_dotfiles(source)
    if not sources:
        return DotfilesResult(status=DotfilesStatus.UP_TO_DATE)

    dry = subprocess.run(
        build_rsync_command(sources, target, dry_run=True),
        capture_output=True,
        text=True,
    )
    if dry.returncode != 0:
        return DotfilesResult(
            status=DotfilesStatus.FAILED,
            error=dry.stderr.strip() or f"rsync exited {dry.returncode}",
        )
    if not parse_itemized_changes(dry.stdout):
        return DotfilesResult(status=DotfilesStatus.UP_TO_DATE)

    real = subprocess.run(
        build_rsync_command(sources, target),
        capture_output=True,
        text=True,
    )
    changed = parse_itemized_changes(real.stdout)
    if real.returncode != 0:
        return DotfilesResult(
            status=DotfilesStatus.FAILED,
            changed=changed,
            error=real.stderr.strip() or f"rsync exited {real.returncode}",
        )
    for name in changed:
        logger.info("Updated %s", name)
    return DotfilesResult(status=DotfilesStatus.UPDATED, changed=changed)
