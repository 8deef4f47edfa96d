from collections import Counter

from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    plan = ctx.plan
    counts = Counter(a.attachment for a in plan.associations)
    results: list[CheckResult] = []
    for attachment in plan.attachments:
        n = counts.get(attachment.key, 0)
        results.append(
            make_result(
                "attachments",
                f"{attachment.name} association",
                n == 1,
                f"associated with {n} domain(s)",
                {"domain": plan.domain_of(attachment.key)},
            )
        )
    return results
