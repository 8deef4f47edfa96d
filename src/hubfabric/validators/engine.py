from __future__ import annotations

import logging

from hubfabric.core.model import CheckResult, CheckStatus, Severity, ValidationContext
from hubfabric.core.registry import ValidatorRegistry
from hubfabric.core.results import RunSummary
from hubfabric.validators.attachments.one_per_owner import validate as validate_att_owner
from hubfabric.validators.attachments.single_association import validate as validate_att_assoc
from hubfabric.validators.routing.propagation_symmetry import validate as validate_rt_symmetry
from hubfabric.validators.routing.reachability import validate as validate_rt_reach
from hubfabric.validators.routing.vpn_isolation import validate as validate_rt_vpn
from hubfabric.validators.subnet_routes.onprem_default import validate as validate_sr_default
from hubfabric.validators.subnet_routes.peer_symmetry import validate as validate_sr_peer
from hubfabric.validators.subnet_routes.route_dependencies import validate as validate_sr_deps

logger = logging.getLogger(__name__)

PHASES = ("attachments", "routing", "subnet-routes")


def default_registry() -> ValidatorRegistry:
    registry = ValidatorRegistry()
    registry.register("attachments", validate_att_owner)
    registry.register("attachments", validate_att_assoc)
    registry.register("routing", validate_rt_symmetry)
    registry.register("routing", validate_rt_reach)
    registry.register("routing", validate_rt_vpn)
    registry.register("subnet-routes", validate_sr_peer)
    registry.register("subnet-routes", validate_sr_default)
    registry.register("subnet-routes", validate_sr_deps)
    return registry


def run_validators(ctx: ValidationContext, mode: str = "all", registry: ValidatorRegistry | None = None) -> RunSummary:
    registry = registry or default_registry()
    phases = list(PHASES) if mode == "all" else [mode]
    summary = RunSummary()
    for phase in phases:
        for validator in registry.get(phase):
            try:
                summary.extend(validator(ctx))
            except Exception as exc:
                logger.exception("validator %s crashed", validator.__module__)
                summary.add(
                    CheckResult(
                        phase=phase,
                        name=validator.__module__.rsplit(".", 1)[-1],
                        status=CheckStatus.FAIL,
                        severity=Severity.ERROR,
                        message=f"Validator crashed: {exc}",
                    )
                )
    return summary
