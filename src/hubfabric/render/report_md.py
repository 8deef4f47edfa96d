from pathlib import Path


def _plan_lines(plan: dict) -> list[str]:
    lines = ["## Outputs"]
    outputs = plan.get("outputs", {})
    for name, segment_id in sorted(outputs.get("segment_ids", {}).items()):
        lines.append(f"- Segment `{name}`: `{segment_id}`")
    lines.append(f"- Hub: `{outputs.get('hub_id', '')}`")
    lines.append(f"- VPN connection: `{outputs.get('vpn_connection_id', '')}`")
    lines.append(f"- On-prem public address: `{outputs.get('onprem_public_address', '')}`")
    lines.append("")
    lines.append("## Declared nodes")

    grouped: dict[str, list[dict]] = {}
    for node in plan.get("nodes", []):
        grouped.setdefault(node.get("kind", "other"), []).append(node)

    for kind, nodes in grouped.items():
        lines.append(f"### {kind} ({len(nodes)})")
        for node in nodes:
            deps = ", ".join(node.get("depends_on", [])) or "-"
            lines.append(f"- `{node['key']}` (depends on: {deps})")
        lines.append("")
    return lines


def write_markdown_report(payload: dict, out_path: Path) -> None:
    lines = ["# hubfabric report", ""]
    if "plan" in payload:
        lines.extend(_plan_lines(payload["plan"]))

    if "results" in payload:
        summary = payload.get("summary", {})
        lines.append("## Validation")
        lines.append(f"- Exit code: {summary.get('exit_code', 1)}")
        lines.append(f"- Status counts: {summary.get('counts_by_status', {})}")
        lines.append("")

        grouped: dict[str, list[dict]] = {}
        for item in payload.get("results", []):
            grouped.setdefault(item.get("phase", "other"), []).append(item)

        for phase, items in grouped.items():
            lines.append(f"### {phase}")
            for item in items:
                lines.append(f"- **{item['status']}** `{item['name']}`: {item['message']}")
            lines.append("")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text("\n".join(lines), encoding="utf-8")
