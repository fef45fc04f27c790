"""Identity file selection."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict


class IdentityError(Exception):
    """Raised when the requested identity file cannot be read."""


class IdentitySetting(BaseModel):
    model_config = ConfigDict(frozen=True)
    enabled: bool = False
    # None means the default SSH identity
    key: Optional[str] = None


def resolve_identity(
    option: str | None, enabled_by_config: bool
) -> IdentitySetting:
    """Combine the ``--identity`` option with the config toggle.

    ``false`` disables identity installation, ``true`` uses the
    default identity, and any other value must be a readable file.
    """
    if option is None or not option.strip():
        return IdentitySetting(enabled=enabled_by_config)

    value = option.strip()
    match value.lower():
        case "false" | "no" | "off":
            return IdentitySetting(enabled=False)
        case "true" | "yes" | "on":
            return IdentitySetting(enabled=True)
        case _:
            path = Path(value).expanduser()
            if not path.is_file():
                raise IdentityError(
                    f"The specified identity file cannot be read: {value}"
                )
            try:
                with open(path, "rb"):
                    pass
            except OSError as e:
                raise IdentityError(
                    f"The specified identity file cannot be read: {value}"
                ) from e
            return IdentitySetting(enabled=True, key=str(path))
