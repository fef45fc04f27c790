"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from sshdash.config import Config, Defaults, NetworkConfig

SAMPLE_YAML = """\
defaults:
  domain: example.com
  user: alice
  port: 22

dotfiles: false

options:
  identity: false
  inventory: true

inventory:
  url: jss.example.com
  username: api-reader
  ea-vpn: VPN IP Address
  ea-fqdn: Registered FQDN
  timeout: 10

network:
  local:
    - 10.0.0.1
  internet:
    - 1.1.1.1
    - 8.8.8.8
"""

SAMPLE_SSH_CONFIG = """\
Host mynas
    HostName nas.example.com
    Port 2222
    User backup

Host *.internal
    User admin
"""

COMPUTER_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<computer>
  <general>
    <id>42</id>
    <name>web01</name>
  </general>
  <extension_attributes>
    <extension_attribute>
      <id>1</id>
      <name>VPN IP Address</name>
      <type>String</type>
      <value>192.168.1.50</value>
    </extension_attribute>
    <extension_attribute>
      <id>2</id>
      <name>Registered FQDN</name>
      <type>String</type>
      <value>web01.corp.example.com</value>
    </extension_attribute>
  </extension_attributes>
</computer>
"""


class FakePrompter:
    """Scripted answers for interactive prompts."""

    def __init__(
        self,
        yes_no: list[bool] | None = None,
        text: list[str] | None = None,
        secret: str = "s3cret",
    ) -> None:
        self.yes_no = list(yes_no or [])
        self.text = list(text or [])
        self.secret = secret
        self.asked: list[tuple[str, object]] = []

    def ask_yes_no(self, prompt: str, default: bool = False) -> bool:
        self.asked.append((prompt, default))
        return self.yes_no.pop(0) if self.yes_no else default

    def ask_text(self, prompt: str, default: str | None = None) -> str:
        self.asked.append((prompt, default))
        if self.text:
            answer = self.text.pop(0)
            return answer if answer else (default or "")
        return default or ""

    def ask_secret(self, prompt: str) -> str:
        self.asked.append((prompt, None))
        return self.secret


class FakeVpnState:
    def __init__(self, active: bool = False, configured: bool = False):
        self.active = active
        self.configured = configured

    def is_vpn_active(self) -> bool:
        return self.active

    def has_vpn_interface_configured(self) -> bool:
        return self.configured


@pytest.fixture()
def computer_xml() -> str:
    return COMPUTER_XML


@pytest.fixture()
def sample_config_file(tmp_path: Path) -> Path:
    """Write sample YAML config to a temp file."""
    p = tmp_path / "config.yaml"
    p.write_text(SAMPLE_YAML)
    return p


@pytest.fixture()
def ssh_config_file(tmp_path: Path) -> Path:
    """Write a sample SSH config to a temp file."""
    p = tmp_path / ".ssh" / "config"
    p.parent.mkdir()
    p.write_text(SAMPLE_SSH_CONFIG)
    return p


@pytest.fixture()
def sample_config() -> Config:
    return Config(
        defaults=Defaults(domain="example.com", user="alice"),
        network=NetworkConfig(
            local=["10.0.0.1"],
            internet=["1.1.1.1", "8.8.8.8"],
        ),
    )


@pytest.fixture()
def make_prompter() -> type[FakePrompter]:
    return FakePrompter


@pytest.fixture()
def make_vpn() -> type[FakeVpnState]:
    return FakeVpnState
