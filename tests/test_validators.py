from hubfabric.composer.attachments import AttachmentRegistry
from hubfabric.composer.domains import RoutingDomainBuilder
from hubfabric.composer.gateway import GatewayProvisioner
from hubfabric.composer.routes import SubnetRouteInstaller
from hubfabric.composer.segments import build_segment
from hubfabric.composer.topology import compose
from hubfabric.core.model import CheckStatus, ValidationContext
from hubfabric.topology.nodes import SegmentRole
from hubfabric.topology.plan import BuildPlan
from hubfabric.topology.reachability import reachability_matrix
from hubfabric.validators.engine import run_validators

SEED = "hybrid:test"


def _failed(summary) -> set[tuple[str, str]]:
    return {(r.phase, r.name) for r in summary.results if r.status == CheckStatus.FAIL}


def _partial_plan():
    plan = BuildPlan()
    gw = GatewayProvisioner(plan, prefix="hybrid", hub_asn=64512, customer_asn=65000, onprem_ip="203.0.113.10", seed=SEED)
    gw.provision()
    dev = build_segment(plan, "development", "10.0.0.0/24", 26, 1, SegmentRole.SPOKE, SEED)
    prod = build_segment(plan, "production", "10.0.1.0/24", 26, 1, SegmentRole.SPOKE, SEED)
    registry = AttachmentRegistry(plan, SEED)
    return plan, gw, dev, prod, registry.attach(dev, gw.hub), registry.attach(prod, gw.hub), registry.attach_vpn(gw.vpn, gw.hub)


def test_composed_plan_passes_every_check(config) -> None:
    summary = run_validators(ValidationContext(config=config, plan=compose(config)))
    assert summary.exit_code == 0
    assert summary.counts_by_status()["FAIL"] == 0
    assert set(summary.counts_by_phase()) == {"attachments", "routing", "subnet-routes"}


def test_full_reachability_matrix(config) -> None:
    matrix = reachability_matrix(compose(config))
    assert matrix == {
        "development": {"production": True, "onprem": True},
        "production": {"development": True, "onprem": True},
        "onprem": {"development": True, "production": True},
    }


def test_missing_reverse_propagation_is_reported(config) -> None:
    plan, gw, dev, prod, dev_att, prod_att, vpn_att = _partial_plan()
    builder = RoutingDomainBuilder(plan, gw.hub, SEED)
    cloud = builder.create_domain("cloud")
    vpn = builder.create_domain("vpn")
    builder.associate(dev_att, cloud)
    builder.associate(prod_att, cloud)
    builder.associate(vpn_att, vpn)
    builder.propagate(dev_att, cloud)
    builder.propagate(prod_att, cloud)
    builder.propagate(vpn_att, cloud)
    builder.propagate(dev_att, vpn)

    summary = run_validators(ValidationContext(config=config, plan=plan), "routing")
    failed = _failed(summary)
    assert ("routing", "attachment:vpn -> domain:cloud reciprocal") in failed
    assert ("routing", "onprem -> production") in failed
    assert ("routing", "onprem -> development") not in failed
    bad = next(r for r in summary.results if r.name == "attachment:vpn -> domain:cloud reciprocal")
    assert bad.evidence["missing"] == ["attachment:production"]
    assert bad.remediation


def test_vpn_sharing_cloud_domain_is_reported(config) -> None:
    plan, gw, dev, prod, dev_att, prod_att, vpn_att = _partial_plan()
    builder = RoutingDomainBuilder(plan, gw.hub, SEED)
    cloud = builder.create_domain("cloud")
    for att in (dev_att, prod_att, vpn_att):
        builder.associate(att, cloud)
        builder.propagate(att, cloud)

    summary = run_validators(ValidationContext(config=config, plan=plan), "routing")
    assert ("routing", "vpn own domain") in _failed(summary)


def test_unassociated_attachment_is_reported(config) -> None:
    plan, gw, *_ = _partial_plan()
    summary = run_validators(ValidationContext(config=config, plan=plan), "attachments")
    assert ("attachments", "development association") in _failed(summary)
    assert ("attachments", "segment:development attached") not in _failed(summary)


def test_missing_peer_route_is_reported(config) -> None:
    plan, gw, dev, prod, dev_att, prod_att, vpn_att = _partial_plan()
    SubnetRouteInstaller(plan, gw.hub).install_peer_routes(dev, prod.cidr, dev_att)
    summary = run_validators(ValidationContext(config=config, plan=plan), "subnet-routes")
    failed = _failed(summary)
    assert ("subnet-routes", "production -> development") in failed
    assert ("subnet-routes", "development -> production") not in failed
