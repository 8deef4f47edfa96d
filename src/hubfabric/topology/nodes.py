from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar

HUB_KEY = "hub"
CUSTOMER_GATEWAY_KEY = "customer-gateway"
DEFAULT_ROUTE = "0.0.0.0/0"


class NodeKind(str, Enum):
    SEGMENT = "segment"
    HUB = "hub"
    CUSTOMER_GATEWAY = "customer-gateway"
    VPN_LINK = "vpn-link"
    ATTACHMENT = "attachment"
    ROUTING_DOMAIN = "routing-domain"
    ASSOCIATION = "association"
    PROPAGATION = "propagation"
    SUBNET_ROUTE = "subnet-route"


class SegmentRole(str, Enum):
    SPOKE = "spoke"
    ONPREM = "onprem"


class VpnLinkState(str, Enum):
    UNPROVISIONED = "Unprovisioned"
    CUSTOMER_GATEWAY_CREATED = "CustomerGatewayCreated"
    TRANSIT_GATEWAY_CREATED = "TransitGatewayCreated"
    VPN_CONNECTION_ESTABLISHED = "VPNConnectionEstablished"


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


class PlanNode:
    __slots__ = ()
    kind: ClassVar[NodeKind]

    @property
    def key(self) -> str:
        raise NotImplementedError

    @property
    def depends_on(self) -> tuple[str, ...]:
        return ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "kind": self.kind.value,
            "key": self.key,
            "depends_on": list(self.depends_on),
        }
        out.update(_jsonable(asdict(self)))
        return out


@dataclass(frozen=True, slots=True)
class Subnet:
    index: int
    cidr: str
    subnet_id: str
    route_table_id: str


@dataclass(frozen=True, slots=True)
class Segment(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.SEGMENT

    name: str
    cidr: str
    role: SegmentRole
    segment_id: str
    subnets: tuple[Subnet, ...] = ()

    @property
    def key(self) -> str:
        return f"segment:{self.name}"

    @property
    def subnet_ids(self) -> tuple[str, ...]:
        return tuple(s.subnet_id for s in self.subnets)

    @property
    def route_table_ids(self) -> tuple[str, ...]:
        return tuple(s.route_table_id for s in self.subnets)


@dataclass(frozen=True, slots=True)
class Hub(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.HUB

    name: str
    hub_id: str
    asn: int
    default_route_table_association: bool = False
    default_route_table_propagation: bool = False
    dns_support: bool = True
    vpn_ecmp_support: bool = True

    @property
    def key(self) -> str:
        return HUB_KEY


@dataclass(frozen=True, slots=True)
class CustomerGateway(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.CUSTOMER_GATEWAY

    name: str
    gateway_id: str
    asn: int
    ip_address: str
    type: str = "ipsec.1"

    @property
    def key(self) -> str:
        return CUSTOMER_GATEWAY_KEY


@dataclass(frozen=True, slots=True)
class VpnLink(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.VPN_LINK

    name: str
    connection_id: str
    state: VpnLinkState
    static_routes_only: bool = False
    type: str = "ipsec.1"

    @property
    def key(self) -> str:
        return f"vpn:{self.name}"

    @property
    def depends_on(self) -> tuple[str, ...]:
        return (HUB_KEY, CUSTOMER_GATEWAY_KEY)


@dataclass(frozen=True, slots=True)
class Attachment(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.ATTACHMENT

    name: str
    owner: str
    attachment_id: str
    resource_type: str
    subnet_ids: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return f"attachment:{self.name}"

    @property
    def depends_on(self) -> tuple[str, ...]:
        return (HUB_KEY, self.owner)


@dataclass(frozen=True, slots=True)
class RoutingDomain(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.ROUTING_DOMAIN

    name: str
    route_table_id: str

    @property
    def key(self) -> str:
        return f"domain:{self.name}"

    @property
    def depends_on(self) -> tuple[str, ...]:
        return (HUB_KEY,)


@dataclass(frozen=True, slots=True)
class Association(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.ASSOCIATION

    attachment: str
    domain: str

    @property
    def key(self) -> str:
        # one association per attachment
        return f"association:{self.attachment}"

    @property
    def depends_on(self) -> tuple[str, ...]:
        return (self.domain, self.attachment)


@dataclass(frozen=True, slots=True)
class Propagation(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.PROPAGATION

    attachment: str
    domain: str

    @property
    def key(self) -> str:
        return f"propagation:{self.attachment}->{self.domain}"

    @property
    def depends_on(self) -> tuple[str, ...]:
        return (self.domain, self.attachment)


@dataclass(frozen=True, slots=True)
class SubnetRoute(PlanNode):
    kind: ClassVar[NodeKind] = NodeKind.SUBNET_ROUTE

    segment: str
    subnet_index: int
    route_table_id: str
    destination: str
    attachment: str
    target: str = HUB_KEY

    @property
    def key(self) -> str:
        name = self.segment.split(":", 1)[-1]
        return f"route:{name}:{self.subnet_index}:{self.destination}"

    @property
    def depends_on(self) -> tuple[str, ...]:
        return (self.segment, self.target, self.attachment)

    @property
    def is_default(self) -> bool:
        return self.destination == DEFAULT_ROUTE
