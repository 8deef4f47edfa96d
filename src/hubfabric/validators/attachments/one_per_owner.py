from collections import Counter

from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    plan = ctx.plan
    counts = Counter(a.owner for a in plan.attachments)
    owners = [s.key for s in plan.spoke_segments()]
    if plan.vpn is not None:
        owners.append(plan.vpn.key)

    results: list[CheckResult] = []
    for owner in owners:
        n = counts.get(owner, 0)
        results.append(make_result("attachments", f"{owner} attached", n == 1, f"{n} attachment(s), expected 1"))
    return results
