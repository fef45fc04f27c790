"""Typer CLI: connect, resolve and add-host commands."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import Config, ConfigError, load_config
from .credentials import KeyringSecretStore, acquire_inventory_credentials
from .dotfiles import DotfilesStatus, resolve_dotfiles_dir, sync_dotfiles
from .hostspec import HostSpec, parse_host_spec
from .identity import IdentityError, IdentitySetting, resolve_identity
from .inventory import AlternateHostResolver, InventoryClient
from .net import icmp_probe, tcp_probe
from .output import (
    OutputFormat,
    StepPrinter,
    print_config_error,
    print_diagnosis,
    print_error,
    print_human_outcome,
)
from .prompt import Prompter, TyperPrompter
from .registration import HostRegistrar
from .remote import (
    SshConfigStore,
    SshTarget,
    format_destination,
    install_identity,
    is_key_installed,
    launch_session,
)
from .resolution import (
    HostResolutionEngine,
    ResolutionOutcome,
    ResolverFactory,
)
from .vpn import SystemVpnState

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="sshdash",
    help="Connect to hosts via SSH, negotiating hostname or IP lookup.",
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Optional[str],
    typer.Option("--config", "-c", help="Path to config file"),
]
DomainOption = Annotated[
    Optional[str],
    typer.Option(
        "--default-domain",
        help="Default domain appended to hosts saved in SSH config",
    ),
]
UserOption = Annotated[
    Optional[str],
    typer.Option(
        "--default-user",
        help="Default username for connections saved to SSH config",
    ),
]
PortOption = Annotated[
    Optional[int],
    typer.Option(
        "--default-port",
        min=1,
        max=65535,
        help="Default port for connections saved to SSH config",
    ),
]
InventoryOption = Annotated[
    Optional[bool],
    typer.Option(
        "--inventory/--no-inventory",
        help="Look up alternate addresses in the inventory service",
    ),
]
VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v, -vv)",
    ),
]


@app.command()
def connect(
    host: Annotated[str, typer.Argument(help="[user@]host[:port]")],
    config: ConfigOption = None,
    default_domain: DomainOption = None,
    default_user: UserOption = None,
    default_port: PortOption = None,
    identity: Annotated[
        Optional[str],
        typer.Option(
            "--identity",
            help="Identity file to install (or true/false)",
        ),
    ] = None,
    dotfiles: Annotated[
        Optional[str],
        typer.Option(
            "--dotfiles",
            help="Directory of dotfiles to sync when connected",
        ),
    ] = None,
    inventory: InventoryOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Resolve a host and open an SSH session to it."""
    _configure_logging(verbose)
    spec = _parse_or_exit(host)
    cfg = _effective_config(
        config,
        spec,
        domain=default_domain,
        user=default_user,
        port=default_port,
        dotfiles=dotfiles,
        inventory=inventory,
    )
    try:
        identity_setting = resolve_identity(identity, cfg.options.identity)
    except IdentityError as e:
        print_error(str(e))
        raise typer.Exit(2)

    console = Console()
    console.print()
    outcome = _resolve(cfg, host, StepPrinter(console))
    if not outcome.succeeded:
        print_diagnosis(outcome)
        raise typer.Exit(1)

    assert outcome.endpoint is not None
    port, user = cfg.defaults.port, cfg.defaults.user
    registered = outcome.registered
    if registered is not None:
        # A Host entry written during this run is authoritative.
        port = registered.port
        user = registered.user or user
    target = SshTarget(
        host=outcome.endpoint.fqdn_or_ip,
        port=port,
        user=user,
        key=identity_setting.key,
    )
    _ensure_identity(target, identity_setting, console)
    _sync_dotfiles(cfg, target, StepPrinter(console))

    console.print(f"Connecting to {format_destination(target)} ...")
    console.print()
    returncode = launch_session(target)
    if returncode != 0:
        raise typer.Exit(returncode)


@app.command()
def resolve(
    host: Annotated[str, typer.Argument(help="[user@]host[:port]")],
    config: ConfigOption = None,
    default_domain: DomainOption = None,
    default_user: UserOption = None,
    default_port: PortOption = None,
    inventory: InventoryOption = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", "-o", help="Output format"),
    ] = OutputFormat.HUMAN,
    verbose: VerboseOption = 0,
) -> None:
    """Resolve a host without connecting."""
    _configure_logging(verbose)
    spec = _parse_or_exit(host)
    cfg = _effective_config(
        config,
        spec,
        domain=default_domain,
        user=default_user,
        port=default_port,
        inventory=inventory,
    )
    steps = StepPrinter(Console(stderr=output is OutputFormat.JSON))
    outcome = _resolve(cfg, host, steps)

    match output:
        case OutputFormat.JSON:
            typer.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
        case OutputFormat.HUMAN:
            print_human_outcome(outcome)

    if not outcome.succeeded:
        raise typer.Exit(1)


@app.command("add-host")
def add_host(
    host: Annotated[str, typer.Argument(help="[user@]host[:port]")],
    config: ConfigOption = None,
    default_domain: DomainOption = None,
    default_user: UserOption = None,
    default_port: PortOption = None,
    verbose: VerboseOption = 0,
) -> None:
    """Add a host to the SSH config."""
    _configure_logging(verbose)
    spec = _parse_or_exit(host)
    cfg = _effective_config(
        config,
        spec,
        domain=default_domain,
        user=default_user,
        port=default_port,
    )
    registrar = HostRegistrar(SshConfigStore(), TyperPrompter(), cfg.defaults)
    entry = registrar.collect(spec)

    steps = StepPrinter()
    steps.start("Adding Host to Config...")
    if registrar.write(entry):
        steps.end("[SUCCESS]", "green")
    else:
        steps.end("[ERROR]", "red")
        raise typer.Exit(1)


def _configure_logging(verbose: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(console=Console(stderr=True), show_path=False)
        ],
        force=True,
    )


def _parse_or_exit(host: str) -> HostSpec:
    try:
        return parse_host_spec(host)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(2)


def _load_config_or_exit(config_path: str | None) -> Config:
    """Load config or exit with code 2 on error."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_config_error(e)
        raise typer.Exit(2)


def _effective_config(
    config_path: str | None,
    spec: HostSpec,
    *,
    domain: str | None = None,
    user: str | None = None,
    port: int | None = None,
    dotfiles: str | None = None,
    inventory: bool | None = None,
) -> Config:
    """Layer CLI options over host-token values over the config file."""
    cfg = _load_config_or_exit(config_path)
    return cfg.with_overrides(
        domain=domain or spec.inferred_domain,
        user=user or spec.user,
        port=port or spec.port,
        dotfiles=dotfiles,
        inventory=inventory,
    )


def _inventory_factory(cfg: Config, prompter: Prompter) -> ResolverFactory:
    def build() -> AlternateHostResolver:
        creds = acquire_inventory_credentials(
            cfg.inventory, prompter, KeyringSecretStore()
        )
        client = InventoryClient(
            creds.url,
            creds.username,
            creds.password,
            timeout=cfg.inventory.timeout,
        )
        return AlternateHostResolver(
            client,
            vpn_attribute=cfg.inventory.ea_vpn,
            fqdn_attribute=cfg.inventory.ea_fqdn,
        )

    return build


def _resolve(
    cfg: Config, host: str, steps: StepPrinter
) -> ResolutionOutcome:
    store = SshConfigStore()
    prompter = TyperPrompter()
    engine = HostResolutionEngine(
        ssh_config=store,
        prompter=prompter,
        registrar=HostRegistrar(store, prompter, cfg.defaults),
        vpn=SystemVpnState(),
        network=cfg.network,
        alternate_resolver=(
            _inventory_factory(cfg, prompter)
            if cfg.options.inventory
            else None
        ),
        tcp_probe=tcp_probe,
        icmp_probe=icmp_probe,
        on_step_start=steps.on_step_start,
        on_step_end=steps.on_step_end,
    )
    return engine.resolve(host)


def _ensure_identity(
    target: SshTarget, setting: IdentitySetting, console: Console
) -> None:
    if not setting.enabled or is_key_installed(target):
        return
    console.print(
        "Transferring Identity. Remote password for "
        f"{format_destination(target)} will be prompted for!"
    )
    if install_identity(target) != 0:
        print_error("Identity could not be installed")


def _sync_dotfiles(cfg: Config, target: SshTarget, steps: StepPrinter) -> None:
    source = resolve_dotfiles_dir(cfg.dotfiles)
    if source is None:
        return
    steps.start("Updating Dotfiles...")
    result = sync_dotfiles(source, target)
    match result.status:
        case DotfilesStatus.UPDATED:
            steps.end("[DONE]", "green")
        case DotfilesStatus.UP_TO_DATE:
            steps.end("[CURRENT]", "green")
        case DotfilesStatus.FAILED:
            steps.end("[FAILED]", "red")
            logger.warning("Dotfile sync failed: %s", result.error)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
