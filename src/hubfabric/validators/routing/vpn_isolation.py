from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    plan = ctx.plan
    results: list[CheckResult] = []
    for vpn in (a for a in plan.attachments if a.resource_type == "vpn"):
        domain = plan.domain_of(vpn.key)
        shared = sorted(
            a.attachment
            for a in plan.associations
            if a.domain == domain and a.attachment != vpn.key
        )
        results.append(
            make_result(
                "routing",
                f"{vpn.name} own domain",
                domain is not None and not shared,
                f"vpn associated with {domain}",
                {"shared_with": shared},
            )
        )
    return results
