from __future__ import annotations

import ipaddress
import logging

from hubfabric.config.schema import FabricConfig
from hubfabric.topology.nodes import Segment, SegmentRole, Subnet
from hubfabric.topology.plan import BuildPlan
from hubfabric.utils.hashing import resource_id

logger = logging.getLogger(__name__)

DEVELOPMENT = "development"
PRODUCTION = "production"
ONPREM = "onprem"


def carve_subnets(cidr: str, mask: int, count: int) -> list[str]:
    network = ipaddress.IPv4Network(cidr)
    out: list[str] = []
    for subnet in network.subnets(new_prefix=mask):
        if len(out) >= count:
            break
        out.append(str(subnet))
    return out


def build_segment(
    plan: BuildPlan,
    name: str,
    cidr: str,
    mask: int,
    count: int,
    role: SegmentRole,
    seed: str,
) -> Segment:
    subnets = tuple(
        Subnet(
            index=index,
            cidr=subnet_cidr,
            subnet_id=resource_id("subnet", f"{name}:{index}", seed),
            route_table_id=resource_id("rtb", f"{name}:{index}", seed),
        )
        for index, subnet_cidr in enumerate(carve_subnets(cidr, mask, count))
    )
    segment = Segment(
        name=name,
        cidr=str(ipaddress.IPv4Network(cidr)),
        role=role,
        segment_id=resource_id("vpc", name, seed),
        subnets=subnets,
    )
    logger.info("segment %s %s with %d subnet(s)", name, segment.cidr, len(subnets))
    return plan.add(segment)


def build_segments(plan: BuildPlan, config: FabricConfig) -> dict[str, Segment]:
    cidrs = config.cidrs
    layout = (
        (DEVELOPMENT, cidrs.development, SegmentRole.SPOKE),
        (PRODUCTION, cidrs.production, SegmentRole.SPOKE),
        (ONPREM, cidrs.onprem, SegmentRole.ONPREM),
    )
    return {
        name: build_segment(plan, name, cidr, cidrs.mask, config.subnets_per_segment, role, config.seed)
        for name, cidr, role in layout
    }
