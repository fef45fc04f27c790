"""Tests for sshdash.resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from sshdash.config import Defaults, NetworkConfig
from sshdash.inventory import (
    Absent,
    AlternateHostResolver,
    ExtensionAttribute,
    Found,
    InventoryRecord,
    LookupFailed,
)
from sshdash.registration import HostRegistrar
from sshdash.remote.sshconfig import SshConfigStore
from sshdash.resolution import (
    Diagnosis,
    HostResolutionEngine,
    ResolutionStep,
    ResolvedEndpoint,
    StepStatus,
)


class ProbeRecorder:
    """Probe fake answering from a set of reachable targets."""

    def __init__(self, reachable: set[str]) -> None:
        self.reachable = reachable
        self.calls: list[str] = []

    def __call__(self, target: str) -> bool:
        self.calls.append(target)
        return target in self.reachable


def _inventory(result: Any) -> MagicMock:
    client = MagicMock()
    client.fetch_computer.return_value = result
    return client


def _vpn_record(value: str) -> InventoryRecord:
    return InventoryRecord(
        computer_name="web01",
        extension_attributes=[ExtensionAttribute(name="VPN", value=value)],
    )


@pytest.fixture()
def ssh_store(ssh_config_file: Path) -> SshConfigStore:
    return SshConfigStore(ssh_config_file)


@pytest.fixture()
def build_engine(
    ssh_store: SshConfigStore,
    make_prompter: Any,
    make_vpn: Any,
) -> Callable[..., HostResolutionEngine]:
    def build(
        *,
        tcp: set[str] | None = None,
        icmp: set[str] | None = None,
        inventory_result: Any = None,
        prompter: Any = None,
        vpn: Any = None,
        network: NetworkConfig | None = None,
        steps: list[tuple[Any, ...]] | None = None,
    ) -> HostResolutionEngine:
        prompter = prompter or make_prompter()
        factory = None
        if inventory_result is not None:
            client = _inventory(inventory_result)

            def factory() -> AlternateHostResolver:
                return AlternateHostResolver(client, vpn_attribute="VPN")

        recorder = steps if steps is not None else []
        return HostResolutionEngine(
            ssh_config=ssh_store,
            prompter=prompter,
            registrar=HostRegistrar(
                ssh_store, prompter, Defaults(domain="example.com")
            ),
            vpn=vpn or make_vpn(),
            network=network
            or NetworkConfig(local=["10.0.0.1"], internet=["1.1.1.1"]),
            alternate_resolver=factory,
            tcp_probe=ProbeRecorder(tcp or set()),
            icmp_probe=ProbeRecorder(icmp or set()),
            on_step_start=lambda step: recorder.append(("start", step)),
            on_step_end=lambda step, status, detail: recorder.append(
                ("end", step, status, detail)
            ),
        )

    return build


class TestPrimaryResolution:
    def test_reachable_primary(self, build_engine: Any) -> None:
        engine = build_engine(tcp={"host.example.com"})
        outcome = engine.resolve("host.example.com")
        assert outcome.succeeded
        assert outcome.endpoint == ResolvedEndpoint(
            fqdn_or_ip="host.example.com", via_alternate=False
        )
        assert outcome.diagnosis is None
        assert engine.icmp_probe.calls == []

    def test_uses_ssh_config_hostname(self, build_engine: Any) -> None:
        engine = build_engine(tcp={"nas.example.com"})
        outcome = engine.resolve("backup@mynas")
        assert outcome.fqdn == "nas.example.com"
        assert outcome.endpoint is not None
        assert outcome.endpoint.fqdn_or_ip == "nas.example.com"

    def test_malformed_ssh_config_is_ignored(
        self, build_engine: Any, ssh_config_file: Path
    ) -> None:
        ssh_config_file.write_text("Host web01\n    HostName\n")
        engine = build_engine(tcp={"web01.example.com"})
        outcome = engine.resolve("web01.example.com")
        assert outcome.fqdn == "web01.example.com"
        assert outcome.succeeded

    def test_probes_are_not_cached(self, build_engine: Any) -> None:
        engine = build_engine(tcp={"host.example.com"})
        engine.resolve("host.example.com")
        engine.resolve("host.example.com")
        assert engine.tcp_probe.calls == [
            "host.example.com",
            "host.example.com",
        ]

    def test_no_inventory_fetch_when_reachable(
        self, build_engine: Any
    ) -> None:
        factory_calls: list[int] = []
        engine = build_engine(
            tcp={"host.example.com"},
            inventory_result=_vpn_record("10.0.0.5"),
        )
        original = engine._resolver_factory

        def counting() -> AlternateHostResolver:
            factory_calls.append(1)
            return original()

        engine._resolver_factory = counting
        engine.resolve("host.example.com")
        assert factory_calls == []


class TestUnknownHost:
    def test_declined_uses_raw_host(
        self, build_engine: Any, make_prompter: Any, ssh_store: Any
    ) -> None:
        prompter = make_prompter(yes_no=[False])
        engine = build_engine(tcp={"web01"}, prompter=prompter)
        outcome = engine.resolve("web01")
        assert outcome.fqdn == "web01"
        assert outcome.succeeded
        assert outcome.registered is None
        assert not ssh_store.has_entry("web01")

    def test_accepted_registers_entry(
        self, build_engine: Any, make_prompter: Any, ssh_store: Any
    ) -> None:
        prompter = make_prompter(yes_no=[True])
        steps: list[tuple[Any, ...]] = []
        engine = build_engine(
            tcp={"web01.example.com"}, prompter=prompter, steps=steps
        )
        outcome = engine.resolve("web01")
        assert outcome.fqdn == "web01.example.com"
        assert outcome.registered is not None
        assert outcome.registered.alias == "web01"
        assert ssh_store.lookup("web01") == "web01.example.com"
        assert (
            "end",
            ResolutionStep.CONFIG_WRITE,
            StepStatus.PASS,
            None,
        ) in steps

    def test_dotted_host_is_not_prompted(
        self, build_engine: Any, make_prompter: Any
    ) -> None:
        prompter = make_prompter()
        engine = build_engine(tcp={"web01.other.org"}, prompter=prompter)
        outcome = engine.resolve("web01.other.org")
        assert outcome.fqdn == "web01.other.org"
        assert prompter.asked == []


class TestAlternateResolution:
    def test_vpn_alternate_reachable(self, build_engine: Any) -> None:
        steps: list[tuple[Any, ...]] = []
        engine = build_engine(
            tcp={"192.168.1.50"},
            inventory_result=_vpn_record("192.168.1.50"),
            steps=steps,
        )
        outcome = engine.resolve("host.example.com")
        assert outcome.endpoint == ResolvedEndpoint(
            fqdn_or_ip="192.168.1.50", via_alternate=True
        )
        assert outcome.alternate == Found(value="192.168.1.50")
        assert [p.target for p in outcome.probes] == [
            "host.example.com",
            "192.168.1.50",
        ]
        assert steps == [
            ("start", ResolutionStep.PRIMARY_PROBE),
            ("end", ResolutionStep.PRIMARY_PROBE, StepStatus.FAIL, None),
            ("start", ResolutionStep.INVENTORY_LOOKUP),
            (
                "end",
                ResolutionStep.INVENTORY_LOOKUP,
                StepStatus.PASS,
                "192.168.1.50",
            ),
            ("start", ResolutionStep.ALTERNATE_PROBE),
            ("end", ResolutionStep.ALTERNATE_PROBE, StepStatus.PASS, None),
        ]

    def test_inventory_queried_with_original_host(
        self, build_engine: Any
    ) -> None:
        engine = build_engine(inventory_result=_vpn_record("none"))
        engine.resolve("backup@mynas")
        assert engine._resolver is not None
        client = engine._resolver.client
        client.fetch_computer.assert_called_once_with("mynas")

    def test_resolver_is_built_once(self, build_engine: Any) -> None:
        factory_calls: list[int] = []
        engine = build_engine(inventory_result=_vpn_record("none"))
        original = engine._resolver_factory

        def counting() -> AlternateHostResolver:
            factory_calls.append(1)
            return original()

        engine._resolver_factory = counting
        engine.resolve("host.example.com")
        engine.resolve("host.example.com")
        assert factory_calls == [1]

    def test_sentinel_alternate_is_not_probed(
        self, build_engine: Any
    ) -> None:
        engine = build_engine(inventory_result=_vpn_record("None"))
        outcome = engine.resolve("host.example.com")
        assert outcome.alternate == Absent()
        assert engine.tcp_probe.calls == ["host.example.com"]
        assert outcome.diagnosis is not None

    def test_alternate_unreachable(self, build_engine: Any) -> None:
        engine = build_engine(
            inventory_result=_vpn_record("192.168.1.50"),
            icmp={"10.0.0.1", "1.1.1.1"},
        )
        outcome = engine.resolve("host.example.com")
        assert not outcome.succeeded
        assert outcome.diagnosis is Diagnosis.HOST_UNREACHABLE
        assert outcome.probes[1].target == "192.168.1.50"
        assert outcome.probes[1].reachable_tcp22 is False

    def test_lookup_failed_continues_to_diagnosis(
        self, build_engine: Any
    ) -> None:
        steps: list[tuple[Any, ...]] = []
        engine = build_engine(
            inventory_result=LookupFailed(reason="Error: Unauthorized"),
            steps=steps,
        )
        outcome = engine.resolve("host.example.com")
        assert outcome.alternate == LookupFailed(
            reason="Error: Unauthorized"
        )
        assert outcome.diagnosis is not None
        assert (
            "end",
            ResolutionStep.INVENTORY_LOOKUP,
            StepStatus.ERROR,
            "Error: Unauthorized",
        ) in steps

    def test_inventory_disabled(self, build_engine: Any) -> None:
        steps: list[tuple[Any, ...]] = []
        engine = build_engine(steps=steps)
        outcome = engine.resolve("host.example.com")
        assert outcome.alternate is None
        assert all(s[1] is not ResolutionStep.INVENTORY_LOOKUP for s in steps)


class TestDiagnosis:
    def test_host_online_ssh_refused(self, build_engine: Any) -> None:
        engine = build_engine(icmp={"host.example.com"})
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.HOST_ONLINE_SSH_REFUSED
        assert outcome.probes[0].reachable_icmp is True
        assert engine.icmp_probe.calls == ["host.example.com"]

    def test_check_vpn(self, build_engine: Any, make_vpn: Any) -> None:
        engine = build_engine(
            inventory_result=LookupFailed(reason="boom"),
            vpn=make_vpn(active=False, configured=True),
        )
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.CHECK_VPN
        assert not outcome.succeeded

    def test_vpn_already_active(
        self, build_engine: Any, make_vpn: Any
    ) -> None:
        engine = build_engine(
            icmp={"1.1.1.1"},
            vpn=make_vpn(active=True, configured=True),
        )
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.HOST_UNREACHABLE

    def test_no_vpn_configured(
        self, build_engine: Any, make_vpn: Any
    ) -> None:
        engine = build_engine(vpn=make_vpn(active=False, configured=False))
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.NO_INTERNET

    def test_local_up_internet_down(
        self, build_engine: Any, make_vpn: Any
    ) -> None:
        engine = build_engine(
            icmp={"10.0.0.1"},
            vpn=make_vpn(active=False, configured=True),
        )
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.NO_INTERNET

    def test_generic_unreachable(self, build_engine: Any) -> None:
        engine = build_engine(icmp={"10.0.0.1", "1.1.1.1"})
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.HOST_UNREACHABLE

    def test_empty_canaries_fail_open(
        self, build_engine: Any, make_vpn: Any
    ) -> None:
        engine = build_engine(
            vpn=make_vpn(active=False, configured=True),
            network=NetworkConfig(),
        )
        outcome = engine.resolve("host.example.com")
        assert outcome.diagnosis is Diagnosis.HOST_UNREACHABLE
