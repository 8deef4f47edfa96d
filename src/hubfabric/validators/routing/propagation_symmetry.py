from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.topology.reachability import propagated_into
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    """Every cross-domain propagation needs its reciprocal."""
    plan = ctx.plan
    results: list[CheckResult] = []
    for propagation in plan.propagations:
        home = plan.domain_of(propagation.attachment)
        if home is None or home == propagation.domain:
            continue
        members = [a.attachment for a in plan.associations if a.domain == propagation.domain]
        back = propagated_into(plan, home)
        missing = sorted(m for m in members if m not in back)
        results.append(
            make_result(
                "routing",
                f"{propagation.attachment} -> {propagation.domain} reciprocal",
                not missing,
                f"members of {propagation.domain} propagated into {home}",
                {"missing": missing},
                "propagate the missing attachments into the home domain",
            )
        )
    return results
