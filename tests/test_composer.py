import pytest

from hubfabric.composer.domains import RoutingDomainBuilder
from hubfabric.composer.topology import TopologyComposer, compose
from hubfabric.core.errors import AsymmetricPropagationError, CompositionError, ConfigurationError, DanglingReferenceError
from hubfabric.topology.nodes import DEFAULT_ROUTE, VpnLinkState


def test_scenario(config) -> None:
    plan = compose(config)

    assert plan.hub is not None
    assert plan.vpn.state == VpnLinkState.VPN_CONNECTION_ESTABLISHED
    assert len(plan.attachments) == 3

    domains = {d.name: d.key for d in plan.domains}
    cloud = [a.attachment for a in plan.associations if a.domain == domains["cloud"]]
    vpn = [a.attachment for a in plan.associations if a.domain == domains["vpn"]]
    assert sorted(cloud) == ["attachment:development", "attachment:production"]
    assert vpn == ["attachment:vpn"]

    peer = [r for r in plan.routes if not r.is_default]
    default = [r for r in plan.routes if r.is_default]
    assert len(peer) == 4
    assert len(default) == 1

    outputs = plan.outputs()
    assert outputs["hub_id"]
    assert outputs["vpn_connection_id"]
    assert outputs["onprem_public_address"] == "203.0.113.10"
    assert set(outputs["segment_ids"]) == {"development", "production", "onprem"}


def test_cross_segment_routes_are_symmetric(config) -> None:
    plan = compose(config)
    segs = {s.name: s for s in plan.segments}
    for src, dst in (("development", "production"), ("production", "development")):
        routes = [r for r in plan.routes if r.segment == segs[src].key and r.destination == segs[dst].cidr]
        assert len(routes) == len(segs[src].subnets)
        assert all(r.target == plan.hub.key for r in routes)
        assert all(r.attachment == f"attachment:{src}" for r in routes)


def test_onprem_has_one_default_route(config) -> None:
    plan = compose(config)
    onprem = plan.onprem_segments()[0]
    for subnet in onprem.subnets:
        defaults = [
            r for r in plan.routes
            if r.segment == onprem.key and r.subnet_index == subnet.index and r.destination == DEFAULT_ROUTE
        ]
        assert len(defaults) == 1
        assert defaults[0].target == plan.hub.key


def test_every_attachment_has_one_domain(config) -> None:
    plan = compose(config)
    for attachment in plan.attachments:
        assert len([a for a in plan.associations if a.attachment == attachment.key]) == 1


def test_idempotent(config) -> None:
    first = compose(config).to_dict()
    second = compose(config).to_dict()
    assert first == second
    keys = [n["key"] for n in first["nodes"]]
    assert len(keys) == len(set(keys))


def test_more_subnets(config) -> None:
    config.subnets_per_segment = 3
    plan = compose(config)
    assert len([r for r in plan.routes if not r.is_default]) == 12
    assert len([r for r in plan.routes if r.is_default]) == 3


def test_missing_onprem_ip_creates_nothing(config) -> None:
    config.onprem_public_ip = ""
    composer = TopologyComposer(config)
    with pytest.raises(ConfigurationError):
        composer.compose()
    assert composer.plan.attachments == []
    assert len(composer.plan) == 0


@pytest.mark.parametrize("field, value", [("mask", "wide"), ("subnets_per_segment", "two")])
def test_non_integer_sizes_create_nothing(config, field: str, value: str) -> None:
    target = config.cidrs if field == "mask" else config
    setattr(target, field, value)
    composer = TopologyComposer(config)
    with pytest.raises(ConfigurationError) as info:
        composer.compose()
    assert info.value.step == "config"
    assert len(composer.plan) == 0


class _BrokenRoutes(TopologyComposer):
    def _install_routes(self) -> None:
        super()._install_routes()
        raise DanglingReferenceError("route table gone")


class _OneWayPropagation(TopologyComposer):
    def _build_domains(self) -> None:
        builder = RoutingDomainBuilder(self.plan, self.hub, self.config.seed)
        cloud = builder.create_domain("cloud")
        vpn = builder.create_domain("vpn")
        for name in ("development", "production"):
            builder.associate(self.attachments[name], cloud)
            builder.propagate(self.attachments[name], cloud)
        builder.associate(self.attachments["vpn"], vpn)
        builder.propagate(self.attachments["vpn"], cloud)


def test_failing_step_is_named_and_plan_discarded(config) -> None:
    composer = _BrokenRoutes(config)
    with pytest.raises(CompositionError) as info:
        composer.compose()
    assert info.value.step == "subnet-routes"
    assert isinstance(info.value.cause, DanglingReferenceError)
    assert len(composer.plan) == 0
    assert composer.hub is None


def test_one_way_propagation_is_rejected(config) -> None:
    composer = _OneWayPropagation(config)
    with pytest.raises(AsymmetricPropagationError) as info:
        composer.compose()
    assert info.value.step == "validate"
    names = {f.name for f in info.value.failures}
    assert "onprem -> development" in names
    assert len(composer.plan) == 0
