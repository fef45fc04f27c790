"""SSH config, session launch and remote command helpers."""

from .fabricssh import is_key_installed
from .ssh import (
    SshTarget,
    build_copy_id_args,
    build_session_args,
    build_ssh_e_option,
    format_destination,
    format_remote_path,
    install_identity,
    launch_session,
)
from .sshconfig import SshConfigStore, format_host_block

__all__ = [
    "SshConfigStore",
    "SshTarget",
    "build_copy_id_args",
    "build_session_args",
    "build_ssh_e_option",
    "format_destination",
    "format_host_block",
    "format_remote_path",
    "install_identity",
    "is_key_installed",
    "launch_session",
]
