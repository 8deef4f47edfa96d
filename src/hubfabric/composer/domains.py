from __future__ import annotations

import logging

from hubfabric.core.errors import AssociationConflictError
from hubfabric.topology.nodes import Association, Attachment, Hub, Propagation, RoutingDomain
from hubfabric.topology.plan import BuildPlan
from hubfabric.utils.hashing import resource_id

logger = logging.getLogger(__name__)

CLOUD_DOMAIN = "cloud"
VPN_DOMAIN = "vpn"


class RoutingDomainBuilder:
    """Creates hub route tables and wires associations and propagations.

    Association decides which table an attachment's traffic is looked up in;
    propagation decides whose routes appear in a table. The two domains built
    by :meth:`build` have disjoint associations, so propagation is the only
    coupling between them and it is always declared in both directions.
    """

    def __init__(self, plan: BuildPlan, hub: Hub, seed: str) -> None:
        self.plan = plan
        self.hub = hub
        self.seed = seed

    def create_domain(self, name: str) -> RoutingDomain:
        domain = RoutingDomain(
            name=name,
            route_table_id=resource_id("tgw-rtb", f"domain:{name}", self.seed),
        )
        logger.info("routing domain %s on %s", name, self.hub.name)
        return self.plan.add(domain)

    def associate(self, attachment: Attachment, domain: RoutingDomain) -> Association:
        self.plan.require(domain.key, RoutingDomain)
        self.plan.require(attachment.key, Attachment)
        current = self.plan.domain_of(attachment.key)
        if current is not None:
            raise AssociationConflictError(f"{attachment.key} is already associated with {current}")
        logger.debug("associate %s with %s", attachment.name, domain.name)
        return self.plan.add(Association(attachment=attachment.key, domain=domain.key))

    def propagate(self, attachment: Attachment, domain: RoutingDomain) -> Propagation:
        self.plan.require(domain.key, RoutingDomain)
        self.plan.require(attachment.key, Attachment)
        propagation = Propagation(attachment=attachment.key, domain=domain.key)
        existing = self.plan.get(propagation.key)
        if isinstance(existing, Propagation):
            return existing
        logger.debug("propagate %s into %s", attachment.name, domain.name)
        return self.plan.add(propagation)

    def build(
        self,
        development: Attachment,
        production: Attachment,
        vpn: Attachment,
    ) -> tuple[RoutingDomain, RoutingDomain]:
        spokes = (development, production)

        cloud = self.create_domain(CLOUD_DOMAIN)
        for spoke in spokes:
            self.associate(spoke, cloud)
        for spoke in spokes:
            self.propagate(spoke, cloud)

        vpn_domain = self.create_domain(VPN_DOMAIN)
        self.associate(vpn, vpn_domain)
        self.propagate(vpn, vpn_domain)

        # cross-domain, both directions
        self.propagate(vpn, cloud)
        for spoke in spokes:
            self.propagate(spoke, vpn_domain)
        return cloud, vpn_domain
