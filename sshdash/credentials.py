"""Secret storage and inventory credential acquisition."""

from __future__ import annotations

import getpass
import logging
from typing import Protocol

import keyring
from keyring.errors import KeyringError
from pydantic import BaseModel, ConfigDict

from .config import InventoryConfig
from .prompt import Prompter

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "sshdash"
INVENTORY_SECRET_KEY = "inventory"


class SecretStore(Protocol):
    def get_secret(self, key: str) -> str | None: ...

    def set_secret(self, key: str, value: str) -> bool: ...


class KeyringSecretStore:
    """Secrets kept in the platform keyring."""

    def __init__(self, service: str = KEYRING_SERVICE) -> None:
        self.service = service

    def get_secret(self, key: str) -> str | None:
        try:
            return keyring.get_password(self.service, key)
        except KeyringError as e:
            logger.warning("Keyring lookup for '%s' failed: %s", key, e)
            return None

    def set_secret(self, key: str, value: str) -> bool:
        try:
            keyring.set_password(self.service, key, value)
        except KeyringError as e:
            logger.warning("Keyring update for '%s' failed: %s", key, e)
            return False
        return True


class InventoryCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)
    url: str
    username: str
    password: str


def acquire_inventory_credentials(
    settings: InventoryConfig,
    prompter: Prompter,
    secrets: SecretStore,
) -> InventoryCredentials:
    """Collect the inventory URL, username and password.

    Missing values are prompted for. A prompted password may be
    saved to the secret store for later runs.
    """
    username = settings.username or prompter.ask_text(
        "What is the username for the inventory service?",
        getpass.getuser(),
    )
    url = settings.url or prompter.ask_text(
        "What is the URL for the inventory service?"
    )
    password = secrets.get_secret(INVENTORY_SECRET_KEY)
    if not password:
        password = prompter.ask_secret(
            f"What is the inventory password for the user {username}?"
        )
        if prompter.ask_yes_no(
            "Would you like to save this password in your keychain?",
            default=False,
        ):
            if not secrets.set_secret(INVENTORY_SECRET_KEY, password):
                logger.warning("The password could not be saved")
    return InventoryCredentials(url=url, username=username, password=password)
