from typing import Any


def diff_dict(
    old: dict[str, Any],
    new: dict[str, Any],
    prefix: str = "",
    ignore: frozenset[str] = frozenset(),
) -> list[dict[str, Any]]:
    """Flat list of added/removed/changed leaves, keyed by dotted path."""
    out: list[dict[str, Any]] = []
    keys = sorted(set(old) | set(new))
    for key in keys:
        path = f"{prefix}.{key}" if prefix else key
        if path in ignore:
            continue
        if key not in old:
            out.append({"path": path, "type": "added", "new": new[key]})
            continue
        if key not in new:
            out.append({"path": path, "type": "removed", "old": old[key]})
            continue
        ov, nv = old[key], new[key]
        if isinstance(ov, dict) and isinstance(nv, dict):
            out.extend(diff_dict(ov, nv, path, ignore))
        elif ov != nv:
            out.append({"path": path, "type": "changed", "old": ov, "new": nv})
    return out
