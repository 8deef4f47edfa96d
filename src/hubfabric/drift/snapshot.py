from hubfabric.drift.diff import diff_dict
from hubfabric.topology.plan import BuildPlan
from hubfabric.utils.hashing import sha256_json
from hubfabric.utils.time import utc_now_iso

SNAPSHOT_METADATA = frozenset({"deployment", "timestamp"})


def fingerprint(plan: BuildPlan) -> dict:
    nodes = {}
    for node in plan.ordered():
        payload = node.to_dict()
        nodes[node.key] = {
            "kind": payload["kind"],
            "hash": sha256_json(payload),
        }
    return {
        "plan_hash": sha256_json(plan.to_dict()),
        "nodes": nodes,
        "outputs": plan.outputs(),
    }


def collect_snapshot(plan: BuildPlan, deployment: str) -> dict:
    return {
        "deployment": deployment,
        "timestamp": utc_now_iso(),
        **fingerprint(plan),
    }


def compare_snapshot(old: dict, plan: BuildPlan) -> list[dict]:
    current = fingerprint(plan)
    return diff_dict(old, current, ignore=SNAPSHOT_METADATA)
