import pytest

from hubfabric.composer.gateway import GatewayProvisioner
from hubfabric.core.errors import ConfigurationError, InvalidTransitionError
from hubfabric.topology.nodes import VpnLinkState
from hubfabric.topology.plan import BuildPlan


def _provisioner(plan: BuildPlan, onprem_ip: str = "203.0.113.10", customer_asn: int = 65000) -> GatewayProvisioner:
    return GatewayProvisioner(
        plan, prefix="hybrid", hub_asn=64512, customer_asn=customer_asn, onprem_ip=onprem_ip, seed="hybrid:test"
    )


def test_provision_walks_every_state() -> None:
    plan = BuildPlan()
    gw = _provisioner(plan)
    assert gw.state == VpnLinkState.UNPROVISIONED
    gw.create_customer_gateway()
    assert gw.state == VpnLinkState.CUSTOMER_GATEWAY_CREATED
    gw.create_transit_gateway()
    assert gw.state == VpnLinkState.TRANSIT_GATEWAY_CREATED
    vpn = gw.establish_connection()
    assert gw.state == VpnLinkState.VPN_CONNECTION_ESTABLISHED
    assert vpn.state == VpnLinkState.VPN_CONNECTION_ESTABLISHED
    assert vpn.depends_on == ("hub", "customer-gateway")
    assert plan.hub.asn == 64512
    assert plan.hub.default_route_table_association is False
    assert plan.customer_gateway.ip_address == "203.0.113.10"


def test_transitions_are_sequential() -> None:
    gw = _provisioner(BuildPlan())
    with pytest.raises(InvalidTransitionError):
        gw.create_transit_gateway()
    with pytest.raises(InvalidTransitionError):
        gw.establish_connection()
    gw.create_customer_gateway()
    with pytest.raises(InvalidTransitionError):
        gw.create_customer_gateway()


def test_malformed_ip_fails_at_customer_gateway() -> None:
    plan = BuildPlan()
    gw = _provisioner(plan, onprem_ip="not-an-ip")
    with pytest.raises(ConfigurationError):
        gw.provision()
    assert gw.state == VpnLinkState.UNPROVISIONED
    assert len(plan) == 0


def test_malformed_customer_asn() -> None:
    plan = BuildPlan()
    gw = _provisioner(plan, customer_asn=-5)
    with pytest.raises(ConfigurationError):
        gw.create_customer_gateway()
    assert plan.hub is None
