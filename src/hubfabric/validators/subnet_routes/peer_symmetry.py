from itertools import permutations

from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    plan = ctx.plan
    hub_key = plan.hub.key if plan.hub else None
    onprem = plan.onprem_segments()
    results: list[CheckResult] = []

    targets = [(a, b.cidr, b.name) for a, b in permutations(plan.spoke_segments(), 2)]
    targets += [(a, o.cidr, o.name) for a in plan.spoke_segments() for o in onprem]
    for segment, destination, peer in targets:
        installed = {
            r.subnet_index
            for r in plan.routes
            if r.segment == segment.key and r.destination == destination and r.target == hub_key
        }
        missing = sorted(s.index for s in segment.subnets if s.index not in installed)
        results.append(
            make_result(
                "subnet-routes",
                f"{segment.name} -> {peer}",
                not missing,
                f"{destination} via hub on every subnet",
                {"missing_subnets": missing},
            )
        )
    return results
