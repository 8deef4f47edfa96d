from __future__ import annotations

from .nodes import Attachment
from .plan import BuildPlan


def endpoints(plan: BuildPlan) -> dict[str, Attachment]:
    """Reachable endpoints by name; on-prem is represented by the vpn attachment."""
    out: dict[str, Attachment] = {}
    for attachment in plan.attachments:
        name = "onprem" if attachment.resource_type == "vpn" else attachment.name
        out[name] = attachment
    return out


def propagated_into(plan: BuildPlan, domain: str) -> set[str]:
    return {p.attachment for p in plan.propagations if p.domain == domain}


def can_reach(plan: BuildPlan, source: Attachment, destination: Attachment) -> bool:
    # traffic entering from source is looked up in its associated table
    domain = plan.domain_of(source.key)
    if domain is None:
        return False
    return destination.key in propagated_into(plan, domain)


def reachability_matrix(plan: BuildPlan) -> dict[str, dict[str, bool]]:
    nodes = endpoints(plan)
    return {
        src: {dst: can_reach(plan, a, b) for dst, b in nodes.items() if dst != src}
        for src, a in nodes.items()
    }
