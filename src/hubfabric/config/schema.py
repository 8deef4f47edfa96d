from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegionCidrs:
    development: str
    production: str
    onprem: str
    mask: int


@dataclass(slots=True)
class AsnConfig:
    hub: int
    customer: int


@dataclass(slots=True)
class FabricConfig:
    name: str
    region: str
    cidrs: RegionCidrs
    onprem_public_ip: str
    asns: AsnConfig
    subnets_per_segment: int = 1
    execution_role: str | None = None

    @property
    def seed(self) -> str:
        return f"{self.name}:{self.region}"
