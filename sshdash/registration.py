"""Interactive registration of a new host in the SSH config."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .config import Defaults
from .hostspec import HostSpec
from .prompt import Prompter
from .remote.sshconfig import SshConfigStore

logger = logging.getLogger(__name__)


class HostEntry(BaseModel):
    """An SSH config entry collected from the user."""

    model_config = ConfigDict(frozen=True)
    alias: str
    fqdn: str
    port: int
    user: Optional[str] = None


class HostRegistrar:
    """Collects a Host entry from the user and writes it."""

    def __init__(
        self,
        store: SshConfigStore,
        prompter: Prompter,
        defaults: Defaults,
    ) -> None:
        self.store = store
        self.prompter = prompter
        self.defaults = defaults

    def _domain_for(self, spec: HostSpec) -> str | None:
        return spec.inferred_domain or self.defaults.domain

    def default_alias(self, spec: HostSpec) -> str:
        domain = self._domain_for(spec)
        if domain and spec.host.endswith(f".{domain}"):
            return spec.host[: -len(domain) - 1]
        else:
            return spec.host

    def default_fqdn(self, spec: HostSpec) -> str:
        domain = self._domain_for(spec)
        if not spec.is_dotted and domain:
            return f"{spec.host}.{domain}"
        else:
            return spec.host

    def collect(self, spec: HostSpec) -> HostEntry:
        """Ask for alias, FQDN, user and port."""
        alias = self.prompter.ask_text(
            "What is the alias for this entry?", self.default_alias(spec)
        )
        fqdn = self.prompter.ask_text(
            "What is the fully qualified domain name?",
            self.default_fqdn(spec),
        )
        user = self.prompter.ask_text(
            "What username should be used to connect?",
            spec.user or self.defaults.user or "",
        )
        default_port = spec.effective_port(self.defaults.port)
        port_answer = self.prompter.ask_text(
            "What port should be used to connect?", str(default_port)
        )
        try:
            port = int(port_answer)
        except ValueError:
            logger.warning(
                "Invalid port %r, using %d", port_answer, default_port
            )
            port = default_port
        return HostEntry(
            alias=alias or self.default_alias(spec),
            fqdn=fqdn or self.default_fqdn(spec),
            port=port,
            user=user or None,
        )

    def write(self, entry: HostEntry) -> bool:
        """Append the entry; False if it exists or cannot be written."""
        return self.store.append_entry(
            entry.alias, entry.fqdn, entry.port, entry.user
        )
