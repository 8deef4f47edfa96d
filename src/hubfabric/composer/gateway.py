from __future__ import annotations

import logging

from hubfabric.config.loader import check_customer_asn, check_hub_asn, check_ipv4_address
from hubfabric.core.errors import InvalidTransitionError
from hubfabric.topology.nodes import CustomerGateway, Hub, VpnLink, VpnLinkState
from hubfabric.topology.plan import BuildPlan
from hubfabric.utils.hashing import resource_id

logger = logging.getLogger(__name__)

# state -> next state
TRANSITIONS = {
    VpnLinkState.UNPROVISIONED: VpnLinkState.CUSTOMER_GATEWAY_CREATED,
    VpnLinkState.CUSTOMER_GATEWAY_CREATED: VpnLinkState.TRANSIT_GATEWAY_CREATED,
    VpnLinkState.TRANSIT_GATEWAY_CREATED: VpnLinkState.VPN_CONNECTION_ESTABLISHED,
}


class GatewayProvisioner:
    """Declares the customer gateway, the hub and the VPN connection, strictly in that order."""

    def __init__(
        self,
        plan: BuildPlan,
        *,
        prefix: str,
        hub_asn: int,
        customer_asn: int,
        onprem_ip: str,
        seed: str,
    ) -> None:
        self.plan = plan
        self.prefix = prefix
        self.hub_asn = hub_asn
        self.customer_asn = customer_asn
        self.onprem_ip = onprem_ip
        self.seed = seed
        self.state = VpnLinkState.UNPROVISIONED
        self.customer_gateway: CustomerGateway | None = None
        self.hub: Hub | None = None
        self.vpn: VpnLink | None = None

    def _expect(self, state: VpnLinkState, action: str) -> None:
        if self.state != state:
            raise InvalidTransitionError(f"cannot {action} in state {self.state.value}")

    def _advance(self) -> None:
        self.state = TRANSITIONS[self.state]
        logger.info("vpn link %s -> %s", self.prefix, self.state.value)

    def create_customer_gateway(self) -> CustomerGateway:
        self._expect(VpnLinkState.UNPROVISIONED, "create the customer gateway")
        ip = check_ipv4_address(self.onprem_ip)
        asn = check_customer_asn(self.customer_asn)
        self.customer_gateway = self.plan.add(
            CustomerGateway(
                name=f"{self.prefix}-CGW",
                gateway_id=resource_id("cgw", "customer-gateway", self.seed),
                asn=asn,
                ip_address=str(ip),
            )
        )
        self._advance()
        return self.customer_gateway

    def create_transit_gateway(self) -> Hub:
        self._expect(VpnLinkState.CUSTOMER_GATEWAY_CREATED, "create the transit gateway")
        asn = check_hub_asn(self.hub_asn)
        self.hub = self.plan.add(
            Hub(name=f"{self.prefix}-TGW", hub_id=resource_id("tgw", "hub", self.seed), asn=asn)
        )
        self._advance()
        return self.hub

    def establish_connection(self) -> VpnLink:
        self._expect(VpnLinkState.TRANSIT_GATEWAY_CREATED, "establish the vpn connection")
        self.vpn = self.plan.add(
            VpnLink(
                name=f"{self.prefix}-VPN",
                connection_id=resource_id("vpn", "vpn-connection", self.seed),
                state=VpnLinkState.VPN_CONNECTION_ESTABLISHED,
            )
        )
        self._advance()
        return self.vpn

    def provision(self) -> tuple[Hub, VpnLink]:
        self.create_customer_gateway()
        hub = self.create_transit_gateway()
        vpn = self.establish_connection()
        return hub, vpn
