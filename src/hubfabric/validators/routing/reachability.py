from hubfabric.core.model import CheckResult, ValidationContext
from hubfabric.topology.reachability import reachability_matrix
from hubfabric.validators.base import make_result


def validate(ctx: ValidationContext) -> list[CheckResult]:
    matrix = reachability_matrix(ctx.plan)
    results: list[CheckResult] = []
    for src in sorted(matrix):
        for dst in sorted(matrix[src]):
            forward = matrix[src][dst]
            reverse = matrix.get(dst, {}).get(src, False)
            results.append(
                make_result(
                    "routing",
                    f"{src} -> {dst}",
                    forward and reverse,
                    "reachable both ways" if forward and reverse else "asymmetric or missing reachability",
                    {"forward": forward, "reverse": reverse},
                    "propagate each endpoint into the domain the other is associated with",
                )
            )
    return results
