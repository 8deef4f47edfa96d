from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    plan = ctx.plan
    hub_key = plan.hub.key if plan.hub else None
    results: list[CheckResult] = []
    for segment in plan.onprem_segments():
        for subnet in segment.subnets:
            defaults = [
                r
                for r in plan.routes
                if r.segment == segment.key and r.subnet_index == subnet.index and r.is_default
            ]
            ok = len(defaults) == 1 and defaults[0].target == hub_key
            results.append(
                make_result(
                    "subnet-routes",
                    f"{segment.name}[{subnet.index}] default route",
                    ok,
                    f"{len(defaults)} default route(s), expected 1 via hub",
                )
            )
    return results
