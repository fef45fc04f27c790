from __future__ import annotations

from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _to_kebab(name: str) -> str:
    return name.replace("_", "-")


class _BaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_kebab,
        populate_by_name=True,
    )


_DISABLED_VALUES = {"", "false", "no", "off", "0"}


def _is_disabled(value: object) -> bool:
    return isinstance(value, str) and value.strip().lower() in _DISABLED_VALUES


class Defaults(_BaseModel):
    """Defaults used when a host token or CLI option leaves a field out."""

    model_config = ConfigDict(frozen=True)
    domain: Optional[str] = None
    user: Optional[str] = None
    port: int = Field(default=22, ge=1, le=65535)

    @field_validator("domain", mode="before")
    @classmethod
    def strip_leading_dot(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lstrip(".") or None
        return v


class Options(_BaseModel):
    """Feature toggles."""

    model_config = ConfigDict(frozen=True)
    # Install the local identity on the remote host before connecting
    identity: bool = False
    # Query the inventory service when the primary host is unreachable
    inventory: bool = False


class InventoryConfig(_BaseModel):
    """Device-management inventory (Jamf Classic API) settings.

    ``url`` and ``username`` are prompted for when missing. The
    password is never stored here; it comes from the keyring or
    a prompt.
    """

    model_config = ConfigDict(frozen=True)
    url: Optional[str] = None
    username: Optional[str] = None
    # Extension attribute holding the last VPN-assigned address
    ea_vpn: Optional[str] = None
    # Extension attribute holding a registered FQDN
    ea_fqdn: Optional[str] = None
    timeout: float = Field(default=15.0, gt=0)

    @field_validator("url", mode="before")
    @classmethod
    def strip_scheme(cls, v: object) -> object:
        if isinstance(v, str):
            for scheme in ("https://", "http://"):
                if v.startswith(scheme):
                    v = v[len(scheme) :]
            return v.rstrip("/") or None
        return v


class NetworkConfig(_BaseModel):
    """Canary addresses used to classify connectivity failures."""

    model_config = ConfigDict(frozen=True)
    local: List[str] = Field(default_factory=list)
    internet: List[str] = Field(default_factory=list)


class Config(_BaseModel):
    """Top-level sshdash configuration."""

    defaults: Defaults = Field(default_factory=lambda: Defaults())
    dotfiles: Optional[str] = None
    options: Options = Field(default_factory=lambda: Options())
    inventory: InventoryConfig = Field(
        default_factory=lambda: InventoryConfig()
    )
    network: NetworkConfig = Field(default_factory=lambda: NetworkConfig())

    @field_validator("dotfiles", mode="before")
    @classmethod
    def normalize_dotfiles(cls, v: object) -> object:
        if v is False or _is_disabled(v):
            return None
        return v

    def with_overrides(
        self,
        *,
        domain: str | None = None,
        user: str | None = None,
        port: int | None = None,
        dotfiles: str | None = None,
        inventory: bool | None = None,
    ) -> Config:
        """Return a copy with CLI/host-token values layered on top."""
        defaults = self.defaults.model_copy(
            update={
                k: v
                for k, v in {
                    "domain": domain,
                    "user": user,
                    "port": port,
                }.items()
                if v is not None
            }
        )
        options = (
            self.options.model_copy(update={"inventory": inventory})
            if inventory is not None
            else self.options
        )
        update: dict[str, object] = {
            "defaults": defaults,
            "options": options,
        }
        if dotfiles is not None:
            update["dotfiles"] = None if _is_disabled(dotfiles) else dotfiles
        return self.model_copy(update=update)
