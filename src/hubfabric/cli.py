from __future__ import annotations

import json
from pathlib import Path

import typer

from hubfabric.composer.topology import TopologyComposer
from hubfabric.config.loader import load_config
from hubfabric.config.schema import FabricConfig
from hubfabric.core.errors import HubfabricError
from hubfabric.core.logging import configure_logging
from hubfabric.core.model import ValidationContext
from hubfabric.core.results import RunSummary
from hubfabric.drift.snapshot import collect_snapshot, compare_snapshot
from hubfabric.render.cloudformation import render_template
from hubfabric.render.report_json import write_json_report
from hubfabric.render.report_md import write_markdown_report
from hubfabric.topology.plan import BuildPlan
from hubfabric.validators.engine import PHASES, run_validators

app = typer.Typer(add_completion=False)

EXIT_COMPOSITION_FAILED = 2


def _compose(config_path: Path, region: str) -> tuple[FabricConfig, BuildPlan]:
    try:
        config = load_config(config_path, region)
        return config, TopologyComposer(config).compose()
    except HubfabricError as exc:
        step = exc.step or "config"
        typer.echo(f"Composition failed [{step}]: {exc}", err=True)
        raise typer.Exit(code=EXIT_COMPOSITION_FAILED) from exc


def _print_plan(plan: BuildPlan) -> None:
    for node in plan.ordered():
        deps = ", ".join(node.depends_on)
        typer.echo(f"{node.kind.value:15} {node.key}" + (f"  <- {deps}" if deps else ""))
    outputs = plan.outputs()
    for name, segment_id in sorted(outputs["segment_ids"].items()):
        typer.echo(f"output segment {name}: {segment_id}")
    typer.echo(f"output hub: {outputs['hub_id']}")
    typer.echo(f"output vpn connection: {outputs['vpn_connection_id']}")
    typer.echo(f"output on-prem address: {outputs['onprem_public_address']}")


def _print_console(summary: RunSummary) -> None:
    for result in summary.results:
        typer.echo(f"[{result.phase}] {result.status.value:4} {result.name} - {result.message}")
    typer.echo(f"Exit code: {summary.exit_code}")


@app.command()
def plan(
    config: Path = typer.Option(..., "--config"),
    region: str = typer.Option("us-east-1", "--region"),
    json_out: Path | None = typer.Option(None, "--json-out"),
    md_out: Path | None = typer.Option(None, "--md-out"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    configure_logging(verbose)
    cfg, built = _compose(config, region)
    _print_plan(built)

    payload = {"deployment": cfg.seed, "plan": built.to_dict()}
    out_json = json_out or Path("artifacts") / f"{cfg.name}-{region}-plan.json"
    out_md = md_out or Path("artifacts") / f"{cfg.name}-{region}-plan.md"
    write_json_report(payload, out_json)
    write_markdown_report(payload, out_md)


@app.command()
def validate(
    config: Path = typer.Option(..., "--config"),
    region: str = typer.Option("us-east-1", "--region"),
    mode: str = typer.Option("all", "--mode"),
    json_out: Path | None = typer.Option(None, "--json-out"),
    md_out: Path | None = typer.Option(None, "--md-out"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    configure_logging(verbose)
    if mode == "subnet_routes":
        mode = "subnet-routes"
    if mode not in {*PHASES, "all"}:
        raise typer.BadParameter(f"mode must be {'|'.join(PHASES)}|all")

    cfg, built = _compose(config, region)
    summary = run_validators(ValidationContext(config=cfg, plan=built), mode)
    payload = summary.to_dict()
    payload["plan"] = built.to_dict()
    _print_console(summary)

    out_json = json_out or Path("artifacts") / f"{cfg.name}-{region}-validate.json"
    out_md = md_out or Path("artifacts") / f"{cfg.name}-{region}-validate.md"
    write_json_report(payload, out_json)
    write_markdown_report(payload, out_md)
    raise typer.Exit(code=summary.exit_code)


@app.command()
def snapshot(
    config: Path = typer.Option(..., "--config"),
    out: Path = typer.Option(..., "--out"),
    region: str = typer.Option("us-east-1", "--region"),
) -> None:
    cfg, built = _compose(config, region)
    payload = collect_snapshot(built, cfg.seed)
    write_json_report(payload, out)
    typer.echo(f"Snapshot saved: {out}")


@app.command()
def diff(
    config: Path = typer.Option(..., "--config"),
    baseline: Path = typer.Option(..., "--baseline"),
    region: str = typer.Option("us-east-1", "--region"),
) -> None:
    try:
        old = json.loads(baseline.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        typer.echo(f"Cannot read baseline {baseline}: {exc}", err=True)
        raise typer.Exit(code=EXIT_COMPOSITION_FAILED) from exc
    _, built = _compose(config, region)
    diffs = compare_snapshot(old, built)
    if not diffs:
        typer.echo("No differences")
        raise typer.Exit(code=0)
    for item in diffs:
        typer.echo(f"{item['type']:8} {item['path']}")
    typer.echo(f"{len(diffs)} differences")
    raise typer.Exit(code=1)


@app.command()
def template(
    config: Path = typer.Option(..., "--config"),
    out: Path = typer.Option(..., "--out"),
    region: str = typer.Option("us-east-1", "--region"),
) -> None:
    _, built = _compose(config, region)
    write_json_report(render_template(built), out)
    typer.echo(f"Template saved: {out}")


if __name__ == "__main__":
    app()
