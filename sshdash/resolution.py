"""Host resolution: SSH config, reachability probes, inventory fallback.

The flow is a single pass:

1. parse the host token
2. look the alias up in the SSH config, or register/assume an FQDN
3. probe TCP 22 on the working FQDN
4. on failure, ask the inventory for an alternate address and probe it
5. when everything failed, diagnose why with ICMP and canary checks
"""

from __future__ import annotations

import enum
import logging
from typing import Annotated, Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .config import NetworkConfig
from .hostspec import HostSpec, parse_host_spec
from .inventory import (
    Absent,
    AlternateHostResolver,
    AlternateLookup,
    Found,
    LookupFailed,
)
from .net import (
    ProbeResult,
    any_reachable,
    icmp_probe,
    probe_host,
    tcp_probe,
)
from .prompt import Prompter
from .registration import HostEntry, HostRegistrar
from .remote.sshconfig import SshConfigStore
from .vpn import VpnState

logger = logging.getLogger(__name__)


class ResolutionStep(str, enum.Enum):
    """Steps reported through the progress callbacks."""

    CONFIG_WRITE = "config-write"
    PRIMARY_PROBE = "primary-probe"
    INVENTORY_LOOKUP = "inventory-lookup"
    ALTERNATE_PROBE = "alternate-probe"


class StepStatus(str, enum.Enum):
    PASS = "pass"
    FAIL = "fail"
    NONE = "none"
    ERROR = "error"


class Diagnosis(str, enum.Enum):
    """Why a host could not be reached."""

    HOST_ONLINE_SSH_REFUSED = "host-online-ssh-refused"
    CHECK_VPN = "check-vpn"
    NO_INTERNET = "no-internet"
    HOST_UNREACHABLE = "host-unreachable"


class ResolvedEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)
    fqdn_or_ip: str
    via_alternate: bool = False


AlternateResult = Annotated[
    Union[Found, Absent, LookupFailed], Field(discriminator="kind")
]


class ResolutionOutcome(BaseModel):
    """Everything the engine learned while resolving a host."""

    spec: HostSpec
    fqdn: str
    endpoint: Optional[ResolvedEndpoint] = None
    diagnosis: Optional[Diagnosis] = None
    probes: List[ProbeResult] = Field(default_factory=list)
    alternate: Optional[AlternateResult] = None
    registered: Optional[HostEntry] = None

    @property
    def succeeded(self) -> bool:
        return self.endpoint is not None


OnStepStart = Callable[[ResolutionStep], None]
OnStepEnd = Callable[[ResolutionStep, StepStatus, Optional[str]], None]
ResolverFactory = Callable[[], AlternateHostResolver]


class HostResolutionEngine:
    """Resolve a host token into a reachable endpoint or a diagnosis.

    Collaborators are passed in explicitly. The alternate resolver is
    built through *alternate_resolver* at most once, and only when the
    primary host is unreachable, so credentials are not requested for
    reachable hosts. Passing ``None`` disables inventory lookups.
    """

    def __init__(
        self,
        *,
        ssh_config: SshConfigStore,
        prompter: Prompter,
        registrar: HostRegistrar,
        vpn: VpnState,
        network: NetworkConfig,
        alternate_resolver: ResolverFactory | None = None,
        tcp_probe: Callable[[str], bool] = tcp_probe,
        icmp_probe: Callable[[str], bool] = icmp_probe,
        on_step_start: OnStepStart | None = None,
        on_step_end: OnStepEnd | None = None,
    ) -> None:
        self.ssh_config = ssh_config
        self.prompter = prompter
        self.registrar = registrar
        self.vpn = vpn
        self.network = network
        self._resolver_factory = alternate_resolver
        self._resolver: AlternateHostResolver | None = None
        self.tcp_probe = tcp_probe
        self.icmp_probe = icmp_probe
        self._on_step_start = on_step_start
        self._on_step_end = on_step_end

    def _start(self, step: ResolutionStep) -> None:
        if self._on_step_start is not None:
            self._on_step_start(step)

    def _end(
        self,
        step: ResolutionStep,
        status: StepStatus,
        detail: str | None = None,
    ) -> None:
        if self._on_step_end is not None:
            self._on_step_end(step, status, detail)

    def _get_resolver(
        self, factory: ResolverFactory
    ) -> AlternateHostResolver:
        if self._resolver is None:
            self._resolver = factory()
        return self._resolver

    def resolve(self, raw_input: str) -> ResolutionOutcome:
        spec = parse_host_spec(raw_input)
        fqdn, registered = self._working_fqdn(spec)
        outcome = ResolutionOutcome(
            spec=spec, fqdn=fqdn, registered=registered
        )

        primary = self._probe(ResolutionStep.PRIMARY_PROBE, fqdn)
        outcome.probes.append(primary)
        if primary.reachable_tcp22:
            outcome.endpoint = ResolvedEndpoint(fqdn_or_ip=fqdn)
            return outcome

        factory = self._resolver_factory
        if factory is not None:
            alternate = self._lookup_alternate(spec.host, factory)
            outcome.alternate = alternate
            if isinstance(alternate, Found):
                probe = self._probe(
                    ResolutionStep.ALTERNATE_PROBE, alternate.value
                )
                outcome.probes.append(probe)
                if probe.reachable_tcp22:
                    outcome.endpoint = ResolvedEndpoint(
                        fqdn_or_ip=alternate.value, via_alternate=True
                    )
                    return outcome

        host_online = self.icmp_probe(fqdn)
        outcome.probes[0] = primary.model_copy(
            update={"reachable_icmp": host_online}
        )
        outcome.diagnosis = self._diagnose(host_online)
        logger.info("Could not reach %s: %s", fqdn, outcome.diagnosis.value)
        return outcome

    def _working_fqdn(
        self, spec: HostSpec
    ) -> tuple[str, HostEntry | None]:
        hostname = self.ssh_config.lookup(spec.host)
        if hostname:
            return hostname, None
        elif spec.is_dotted:
            return spec.host, None
        elif self.prompter.ask_yes_no(
            "This host is not in your SSH config. Add it?", default=True
        ):
            entry = self.registrar.collect(spec)
            self._start(ResolutionStep.CONFIG_WRITE)
            if self.registrar.write(entry):
                self._end(ResolutionStep.CONFIG_WRITE, StepStatus.PASS)
            else:
                self._end(ResolutionStep.CONFIG_WRITE, StepStatus.ERROR)
            return entry.fqdn, entry
        else:
            return spec.host, None

    def _probe(self, step: ResolutionStep, target: str) -> ProbeResult:
        self._start(step)
        result = probe_host(target, tcp_check=self.tcp_probe)
        self._end(
            step,
            StepStatus.PASS if result.reachable_tcp22 else StepStatus.FAIL,
        )
        return result

    def _lookup_alternate(
        self, host: str, factory: ResolverFactory
    ) -> AlternateLookup:
        self._start(ResolutionStep.INVENTORY_LOOKUP)
        result = self._get_resolver(factory).resolve(host)
        match result:
            case Found(value=value):
                self._end(
                    ResolutionStep.INVENTORY_LOOKUP, StepStatus.PASS, value
                )
            case LookupFailed(reason=reason):
                self._end(
                    ResolutionStep.INVENTORY_LOOKUP, StepStatus.ERROR, reason
                )
            case _:
                self._end(ResolutionStep.INVENTORY_LOOKUP, StepStatus.NONE)
        return result

    def _diagnose(self, host_online: bool) -> Diagnosis:
        if host_online:
            return Diagnosis.HOST_ONLINE_SSH_REFUSED
        elif (
            not any_reachable(self.network.local, self.icmp_probe)
            and not self.vpn.is_vpn_active()
            and self.vpn.has_vpn_interface_configured()
        ):
            return Diagnosis.CHECK_VPN
        elif not any_reachable(self.network.internet, self.icmp_probe):
            return Diagnosis.NO_INTERNET
        else:
            return Diagnosis.HOST_UNREACHABLE
