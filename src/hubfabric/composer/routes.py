from __future__ import annotations

import logging

from hubfabric.core.errors import DanglingReferenceError
from hubfabric.topology.nodes import DEFAULT_ROUTE, Attachment, Hub, Segment, SubnetRoute
from hubfabric.topology.plan import BuildPlan

logger = logging.getLogger(__name__)


class SubnetRouteInstaller:
    def __init__(self, plan: BuildPlan, hub: Hub) -> None:
        self.plan = plan
        self.hub = hub

    def _install(self, segment: Segment, destination: str, attachment: Attachment) -> list[SubnetRoute]:
        # routes must never point at an attachment that does not exist yet
        self.plan.require(attachment.key, Attachment)
        self.plan.require(segment.key, Segment)
        routes = []
        for subnet in segment.subnets:
            route = SubnetRoute(
                segment=segment.key,
                subnet_index=subnet.index,
                route_table_id=subnet.route_table_id,
                destination=destination,
                attachment=attachment.key,
                target=self.hub.key,
            )
            routes.append(self.plan.add(route))
        logger.info("%d route(s) %s -> %s via %s", len(routes), segment.name, destination, self.hub.name)
        return routes

    def install_peer_routes(self, segment: Segment, destination: str, attachment: Attachment) -> list[SubnetRoute]:
        """Route ``destination`` from every subnet of ``segment`` to the hub.

        ``attachment`` must be the segment's own attachment.
        """
        if attachment.owner != segment.key:
            raise DanglingReferenceError(
                f"routes of {segment.key} must depend on its own attachment, not {attachment.key}"
            )
        return self._install(segment, destination, attachment)

    def install_default_route(self, segment: Segment, attachment: Attachment) -> list[SubnetRoute]:
        """Default route for the on-prem-facing segment, reached through the VPN attachment."""
        if attachment.resource_type != "vpn":
            raise DanglingReferenceError(f"default route of {segment.key} must depend on the vpn attachment")
        return self._install(segment, DEFAULT_ROUTE, attachment)
