from __future__ import annotations

import ipaddress
import itertools
from pathlib import Path
from typing import Any

import yaml

from hubfabric.core.errors import ConfigurationError
from hubfabric.utils.yaml import load_yaml

from .schema import AsnConfig, FabricConfig, RegionCidrs

MAX_SUBNET_MASK = 28
HUB_ASN_RANGES = ((64512, 65534), (4200000000, 4294967294))
CUSTOMER_ASN_RANGE = (1, 4294967294)


def _required(data: Any, key: str, where: str = ""):
    label = f"{where}.{key}" if where else key
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where or 'configuration'} must be a mapping, got {data!r}")
    if key not in data or data[key] is None or data[key] == "":
        raise ConfigurationError(f"Missing required key: {label}")
    return data[key]


def _as_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{label} must be an integer, got {value!r}") from exc


def check_ipv4_address(value: Any, label: str = "onprem_public_ip") -> ipaddress.IPv4Address:
    if not value:
        raise ConfigurationError(f"Missing required key: {label}")
    try:
        return ipaddress.IPv4Address(str(value))
    except ValueError as exc:
        raise ConfigurationError(f"{label} is not a valid IPv4 address: {value!r}") from exc


def check_customer_asn(value: Any, label: str = "asns.customer") -> int:
    asn = _as_int(value, label)
    low, high = CUSTOMER_ASN_RANGE
    if not low <= asn <= high:
        raise ConfigurationError(f"{label} {asn} outside {low}-{high}")
    return asn


def check_hub_asn(value: Any, label: str = "asns.hub") -> int:
    asn = _as_int(value, label)
    if not any(low <= asn <= high for low, high in HUB_ASN_RANGES):
        ranges = ", ".join(f"{low}-{high}" for low, high in HUB_ASN_RANGES)
        raise ConfigurationError(f"{label} {asn} is not a private ASN ({ranges})")
    return asn


def _network(value: Any, label: str) -> ipaddress.IPv4Network:
    try:
        return ipaddress.IPv4Network(str(value))
    except ValueError as exc:
        raise ConfigurationError(f"{label} is not a valid IPv4 CIDR: {value!r}") from exc


def validate_config(config: FabricConfig) -> FabricConfig:
    """Check every resolved value; raises ConfigurationError on the first problem."""
    if not config.name:
        raise ConfigurationError("Missing required key: name")
    check_ipv4_address(config.onprem_public_ip)
    hub = check_hub_asn(config.asns.hub)
    customer = check_customer_asn(config.asns.customer)
    if hub == customer:
        raise ConfigurationError(f"asns.hub and asns.customer must differ, both are {hub}")

    config.subnets_per_segment = _as_int(config.subnets_per_segment, "subnets_per_segment")
    if config.subnets_per_segment < 1:
        raise ConfigurationError("subnets_per_segment must be at least 1")

    where = f"regions.{config.region}"
    networks = {}
    for segment in ("development", "production", "onprem"):
        raw = getattr(config.cidrs, segment)
        if not raw:
            raise ConfigurationError(f"Missing required key: {where}.{segment}")
        networks[segment] = _network(raw, f"{where}.{segment}")

    for (a, net_a), (b, net_b) in itertools.combinations(networks.items(), 2):
        if net_a.overlaps(net_b):
            raise ConfigurationError(f"{where}.{a} {net_a} overlaps {where}.{b} {net_b}")

    mask = config.cidrs.mask = _as_int(config.cidrs.mask, f"{where}.mask")
    for segment, net in networks.items():
        if not net.prefixlen <= mask <= MAX_SUBNET_MASK:
            raise ConfigurationError(
                f"{where}.mask /{mask} must be between /{net.prefixlen} ({segment}) and /{MAX_SUBNET_MASK}"
            )
        available = 2 ** (mask - net.prefixlen)
        if available < config.subnets_per_segment:
            raise ConfigurationError(
                f"{where}.{segment} {net} holds {available} /{mask} subnets, "
                f"{config.subnets_per_segment} requested"
            )
    return config


def parse_config(data: dict, region: str) -> FabricConfig:
    regions = _required(data, "regions")
    if not isinstance(regions, dict) or region not in regions:
        raise ConfigurationError(f"No entry for region '{region}' under regions")
    region_data = regions[region]
    where = f"regions.{region}"

    cidrs = RegionCidrs(
        development=str(_required(region_data, "development", where)),
        production=str(_required(region_data, "production", where)),
        onprem=str(_required(region_data, "onprem", where)),
        mask=_as_int(_required(region_data, "mask", where), f"{where}.mask"),
    )

    asn_data = _required(data, "asns")
    asns = AsnConfig(
        hub=_as_int(_required(asn_data, "hub", "asns"), "asns.hub"),
        customer=_as_int(_required(asn_data, "customer", "asns"), "asns.customer"),
    )

    role = data.get("execution_role")
    config = FabricConfig(
        name=str(data.get("name", "hybrid")),
        region=region,
        cidrs=cidrs,
        onprem_public_ip=str(_required(data, "onprem_public_ip")),
        asns=asns,
        subnets_per_segment=_as_int(data.get("subnets_per_segment", 1), "subnets_per_segment"),
        execution_role=str(role) if role else None,
    )
    return validate_config(config)


def load_config(path: Path, region: str) -> FabricConfig:
    try:
        data = load_yaml(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(str(exc)) from exc
    return parse_config(data, region)
