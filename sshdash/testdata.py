"""Fake data builders for manual testing and output validation."""

from __future__ import annotations

from .hostspec import parse_host_spec
from .inventory import Found, LookupFailed
from .net import ProbeResult
from .resolution import (
    Diagnosis,
    ResolutionOutcome,
    ResolvedEndpoint,
)


def direct_outcome() -> ResolutionOutcome:
    return ResolutionOutcome(
        spec=parse_host_spec("alice@web01.example.com"),
        fqdn="web01.example.com",
        endpoint=ResolvedEndpoint(fqdn_or_ip="web01.example.com"),
        probes=[
            ProbeResult(target="web01.example.com", reachable_tcp22=True)
        ],
    )


def alternate_outcome() -> ResolutionOutcome:
    return ResolutionOutcome(
        spec=parse_host_spec("web01"),
        fqdn="web01.example.com",
        endpoint=ResolvedEndpoint(
            fqdn_or_ip="192.168.1.50", via_alternate=True
        ),
        alternate=Found(value="192.168.1.50"),
        probes=[
            ProbeResult(target="web01.example.com", reachable_tcp22=False),
            ProbeResult(target="192.168.1.50", reachable_tcp22=True),
        ],
    )


def failed_outcome(diagnosis: Diagnosis) -> ResolutionOutcome:
    return ResolutionOutcome(
        spec=parse_host_spec("web01"),
        fqdn="web01.example.com",
        diagnosis=diagnosis,
        alternate=LookupFailed(reason="Error: Unauthorized"),
        probes=[
            ProbeResult(
                target="web01.example.com",
                reachable_tcp22=False,
                reachable_icmp=(
                    diagnosis is Diagnosis.HOST_ONLINE_SSH_REFUSED
                ),
            ),
        ],
    )


def failed_outcomes() -> list[ResolutionOutcome]:
    return [failed_outcome(d) for d in Diagnosis]
