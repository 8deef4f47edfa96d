import json
from pathlib import Path

from typer.testing import CliRunner

from hubfabric.cli import app
from hubfabric.composer.topology import TopologyComposer
from hubfabric.core.errors import AsymmetricPropagationError
from hubfabric.utils.yaml import dump_yaml

runner = CliRunner()


def test_plan_writes_reports(tmp_path: Path, config_file: Path) -> None:
    out_json = tmp_path / "plan.json"
    out_md = tmp_path / "plan.md"
    result = runner.invoke(
        app, ["plan", "--config", str(config_file), "--json-out", str(out_json), "--md-out", str(out_md)]
    )
    assert result.exit_code == 0, result.output
    assert "output on-prem address: 203.0.113.10" in result.output
    payload = json.loads(out_json.read_text(encoding="utf-8"))
    assert payload["plan"]["outputs"]["hub_id"].startswith("tgw-")
    assert out_md.exists()


def test_validate_passes(tmp_path: Path, config_file: Path) -> None:
    result = runner.invoke(
        app,
        [
            "validate",
            "--config", str(config_file),
            "--json-out", str(tmp_path / "v.json"),
            "--md-out", str(tmp_path / "v.md"),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Exit code: 0" in result.output


def test_validate_rejects_unknown_mode(config_file: Path) -> None:
    result = runner.invoke(app, ["validate", "--config", str(config_file), "--mode", "bogus"])
    assert result.exit_code != 0


def test_missing_onprem_ip_exits_with_step(tmp_path: Path, raw_config: dict) -> None:
    del raw_config["onprem_public_ip"]
    path = tmp_path / "broken.yml"
    dump_yaml(raw_config, path)
    result = runner.invoke(app, ["plan", "--config", str(path), "--json-out", str(tmp_path / "p.json")])
    assert result.exit_code == 2
    assert "Composition failed [config]" in result.output


def test_scalar_asns_exits_with_config_step(tmp_path: Path, raw_config: dict) -> None:
    raw_config["asns"] = 64512
    path = tmp_path / "broken.yml"
    dump_yaml(raw_config, path)
    result = runner.invoke(app, ["plan", "--config", str(path), "--json-out", str(tmp_path / "p.json")])
    assert result.exit_code == 2
    assert "Composition failed [config]" in result.output


class _FailingValidation(TopologyComposer):
    def _validate(self) -> None:
        raise AsymmetricPropagationError("onprem -> development is one-way")


def test_validation_failure_names_validate_step(monkeypatch, tmp_path: Path, config_file: Path) -> None:
    monkeypatch.setattr("hubfabric.cli.TopologyComposer", _FailingValidation)
    result = runner.invoke(app, ["plan", "--config", str(config_file), "--json-out", str(tmp_path / "p.json")])
    assert result.exit_code == 2
    assert "Composition failed [validate]" in result.output


def test_snapshot_then_diff(tmp_path: Path, config_file: Path, raw_config: dict) -> None:
    snap = tmp_path / "snap.json"
    assert runner.invoke(app, ["snapshot", "--config", str(config_file), "--out", str(snap)]).exit_code == 0

    same = runner.invoke(app, ["diff", "--config", str(config_file), "--baseline", str(snap)])
    assert same.exit_code == 0
    assert "No differences" in same.output

    raw_config["regions"]["us-east-1"]["onprem"] = "10.0.9.0/24"
    changed = tmp_path / "changed.yml"
    dump_yaml(raw_config, changed)
    result = runner.invoke(app, ["diff", "--config", str(changed), "--baseline", str(snap)])
    assert result.exit_code == 1


def test_template_command(tmp_path: Path, config_file: Path) -> None:
    out = tmp_path / "template.json"
    result = runner.invoke(app, ["template", "--config", str(config_file), "--out", str(out)])
    assert result.exit_code == 0, result.output
    template = json.loads(out.read_text(encoding="utf-8"))
    assert template["AWSTemplateFormatVersion"] == "2010-09-09"


def test_diff_missing_baseline(tmp_path: Path, config_file: Path) -> None:
    result = runner.invoke(app, ["diff", "--config", str(config_file), "--baseline", str(tmp_path / "absent.json")])
    assert result.exit_code == 2
    assert "Cannot read baseline" in result.output


def test_diff_invalid_baseline(tmp_path: Path, config_file: Path) -> None:
    baseline = tmp_path / "snap.json"
    baseline.write_text("not json", encoding="utf-8")
    result = runner.invoke(app, ["diff", "--config", str(config_file), "--baseline", str(baseline)])
    assert result.exit_code == 2
    assert "Cannot read baseline" in result.output
