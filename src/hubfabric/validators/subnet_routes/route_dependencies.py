from collections import Counter

from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.topology.nodes import Attachment
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    plan = ctx.plan
    results: list[CheckResult] = []

    wrong = []
    for route in plan.routes:
        attachment = plan.get(route.attachment)
        if not isinstance(attachment, Attachment):
            wrong.append(route.key)
        elif route.is_default and attachment.resource_type != "vpn":
            wrong.append(route.key)
        elif not route.is_default and attachment.owner != route.segment:
            wrong.append(route.key)
    results.append(make_result("subnet-routes", "route dependencies", not wrong, "routes depend on the right attachment", {"wrong": wrong}))

    counts = Counter((r.segment, r.subnet_index, r.destination) for r in plan.routes)
    dupes = [f"{seg}[{idx}] {dst}" for (seg, idx, dst), n in counts.items() if n > 1]
    results.append(make_result("subnet-routes", "route uniqueness", not dupes, "one route per subnet and destination", {"duplicates": dupes}))
    return results
