from __future__ import annotations

import heapq
import logging
from typing import Any, Iterator, TypeVar

from hubfabric.core.errors import (
    AssociationConflictError,
    DanglingReferenceError,
    DuplicateAttachmentError,
    HubfabricError,
)

from .nodes import (
    HUB_KEY,
    Association,
    Attachment,
    CustomerGateway,
    Hub,
    PlanNode,
    Propagation,
    RoutingDomain,
    Segment,
    SegmentRole,
    SubnetRoute,
    VpnLink,
)

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=PlanNode)


class BuildPlan:
    """Ordered declaration of the desired routing state.

    Nodes are declared once and never revised. Every dependency of a node
    must already be declared when the node is added, so a plan can always be
    evaluated in dependency order.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, PlanNode] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[PlanNode]:
        return iter(self._nodes.values())

    def add(self, node: N) -> N:
        key = node.key
        if key in self._nodes:
            if isinstance(node, Attachment):
                raise DuplicateAttachmentError(f"{node.owner} is already attached to the hub as {key}")
            if isinstance(node, Association):
                current = self._nodes[key]
                raise AssociationConflictError(
                    f"{node.attachment} is already associated with {getattr(current, 'domain', '?')}"
                )
            raise HubfabricError(f"Node {key} is already declared")
        missing = [dep for dep in node.depends_on if dep not in self._nodes]
        if missing:
            raise DanglingReferenceError(f"{key} references undeclared {', '.join(missing)}")
        self._nodes[key] = node
        logger.debug("declared %s", key)
        return node

    def get(self, key: str) -> PlanNode | None:
        return self._nodes.get(key)

    def require(self, key: str, kind: type[PlanNode] = PlanNode) -> Any:
        node = self._nodes.get(key)
        if node is None or not isinstance(node, kind):
            raise DanglingReferenceError(f"{key} was never declared")
        return node

    def of_type(self, kind: type[N]) -> list[N]:
        return [n for n in self._nodes.values() if isinstance(n, kind)]

    @property
    def hub(self) -> Hub | None:
        node = self._nodes.get(HUB_KEY)
        return node if isinstance(node, Hub) else None

    @property
    def customer_gateway(self) -> CustomerGateway | None:
        found = self.of_type(CustomerGateway)
        return found[0] if found else None

    @property
    def vpn(self) -> VpnLink | None:
        found = self.of_type(VpnLink)
        return found[0] if found else None

    @property
    def segments(self) -> list[Segment]:
        return self.of_type(Segment)

    @property
    def attachments(self) -> list[Attachment]:
        return self.of_type(Attachment)

    @property
    def domains(self) -> list[RoutingDomain]:
        return self.of_type(RoutingDomain)

    @property
    def associations(self) -> list[Association]:
        return self.of_type(Association)

    @property
    def propagations(self) -> list[Propagation]:
        return self.of_type(Propagation)

    @property
    def routes(self) -> list[SubnetRoute]:
        return self.of_type(SubnetRoute)

    def attachment_for(self, owner: str) -> Attachment | None:
        for attachment in self.attachments:
            if attachment.owner == owner:
                return attachment
        return None

    def domain_of(self, attachment: str) -> str | None:
        assoc = self._nodes.get(f"association:{attachment}")
        return assoc.domain if isinstance(assoc, Association) else None

    def ordered(self) -> list[PlanNode]:
        """Evaluate the dependency graph; ties are broken by key."""
        indegree: dict[str, int] = {}
        dependents: dict[str, list[str]] = {key: [] for key in self._nodes}
        for key, node in self._nodes.items():
            for dep in node.depends_on:
                if dep not in self._nodes:
                    raise DanglingReferenceError(f"{key} references undeclared {dep}")
                dependents[dep].append(key)
            indegree[key] = len(set(node.depends_on))

        ready = [key for key, count in indegree.items() if count == 0]
        heapq.heapify(ready)
        out: list[PlanNode] = []
        while ready:
            key = heapq.heappop(ready)
            out.append(self._nodes[key])
            for child in set(dependents[key]):
                indegree[child] -= 1
                if indegree[child] == 0:
                    heapq.heappush(ready, child)

        if len(out) != len(self._nodes):
            stuck = sorted(key for key, count in indegree.items() if count > 0)
            raise HubfabricError(f"Dependency cycle between {', '.join(stuck)}")
        return out

    def outputs(self) -> dict[str, Any]:
        hub = self.hub
        vpn = self.vpn
        cgw = self.customer_gateway
        return {
            "segment_ids": {s.name: s.segment_id for s in self.segments},
            "hub_id": hub.hub_id if hub else "",
            "vpn_connection_id": vpn.connection_id if vpn else "",
            "onprem_public_address": cgw.ip_address if cgw else "",
        }

    def onprem_segments(self) -> list[Segment]:
        return [s for s in self.segments if s.role == SegmentRole.ONPREM]

    def spoke_segments(self) -> list[Segment]:
        return [s for s in self.segments if s.role == SegmentRole.SPOKE]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.ordered()],
            "outputs": self.outputs(),
        }
