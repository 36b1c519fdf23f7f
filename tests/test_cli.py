"""CLI smoke tests using typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from traitforge import config as config_module
from traitforge.cli.app import app
from traitforge.config import reset_config
from traitforge.core.models import CollectionMeta, CollectionSpec

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep CLI tests away from the real ~/.config/traitforge."""
    monkeypatch.setattr(config_module, "CONFIG_DIR", tmp_path / "cfg")
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "cfg" / "config.json")
    for name in (
        "TRAITFORGE_MAX_ATTEMPTS",
        "TRAITFORGE_BUDGET_BASIS",
        "TRAITFORGE_CACHE_CANDIDATES",
        "TRAITFORGE_WEIGHT_DELIMITER",
        "TRAITFORGE_EXTENSION_DELIMITER",
        "TRAITFORGE_KEY_SEPARATOR",
        "TRAITFORGE_OUTPUT_FOLDER",
        "TRAITFORGE_IMAGE_EXTENSION",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def _make_collection(tmp_path, layers: dict[str, list[str]], count: int, **kwargs):
    """Write a traits folder plus collection.yaml and return the YAML path."""
    traits = tmp_path / "traits"
    for layer, options in layers.items():
        (traits / layer).mkdir(parents=True, exist_ok=True)
        for option in options:
            (traits / layer / option).write_bytes(b"")
    spec = CollectionSpec(
        meta=CollectionMeta(name="Space Cats", description="Cats in space"),
        traits_folder="traits",
        layers=list(layers),
        count=count,
        **kwargs,
    )
    path = tmp_path / "collection.yaml"
    spec.to_yaml(path)
    return path


LAYERS = {
    "background": ["blue.png", "red.png", "green.png"],
    "hat": ["crown#10.png", "cap#90.png"],
}


class TestVersionFlag:
    def test_version_output(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "traitforge" in result.output


class TestInfoCommand:
    def test_info_shows_details(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=4)
        result = runner.invoke(app, ["info", str(path)])
        assert result.exit_code == 0
        assert "Space Cats" in result.output
        assert "background" in result.output
        assert "Total possible combinations" in result.output

    def test_info_json(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=4)
        result = runner.invoke(app, ["--json", "info", str(path)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total_combinations"] == 6
        assert data["layers"] == [
            {"Layer": "background", "Options": "3"},
            {"Layer": "hat", "Options": "2"},
        ]

    def test_info_infeasible(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=7)
        result = runner.invoke(app, ["info", str(path)])
        assert result.exit_code == 4
        assert "exceeds" in result.output

    def test_info_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 3

    def test_info_invalid_spec(self, tmp_path):
        path = tmp_path / "collection.yaml"
        path.write_text("meta:\n  name: X\nlayers: []\ncount: 0\n")
        result = runner.invoke(app, ["info", str(path)])
        assert result.exit_code == 1

    def test_info_warns_about_zero_weight_options(self, tmp_path):
        layers = {"background": ["blue.png", "red.png"], "hat": ["none#0.png", "cap.png"]}
        path = _make_collection(tmp_path, layers, count=4)
        result = runner.invoke(app, ["--json", "info", str(path)])
        assert result.exit_code == 4
        data = json.loads(result.output)
        assert data["total_combinations"] == 4
        assert data["drawable_combinations"] == 2
        assert "none#0.png" in data["warnings"][0]["message"]
        assert "exceeds the total possible combinations (2)" in data["errors"][0]["message"]


class TestGenerateCommand:
    def test_generate_writes_metadata_and_manifest(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=3, start_at=1)
        out_dir = tmp_path / "out"
        result = runner.invoke(
            app, ["generate", str(path), "-o", str(out_dir), "--seed", "42"]
        )
        assert result.exit_code == 0, result.output

        assert sorted(p.name for p in out_dir.glob("[0-9]*.json")) == [
            "1.json",
            "2.json",
            "3.json",
        ]
        record = json.loads((out_dir / "1.json").read_text())
        assert record["name"] == "Space Cats #1"
        assert record["image"] == "1.png"
        assert [a["trait_type"] for a in record["attributes"]] == ["background", "hat"]

        manifest = json.loads((out_dir / "combinations.json").read_text())
        assert manifest["meta"]["seed"] == 42
        keys = {
            ";".join(t["option"] for t in c["traits"]) for c in manifest["combinations"]
        }
        assert len(keys) == 3

    def test_generate_json_mode(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=3)
        out_dir = tmp_path / "out"
        result = runner.invoke(
            app, ["--json", "generate", str(path), "-o", str(out_dir), "--seed", "1"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "success"
        assert data["generated_count"] == 3
        assert data["metadata_files"] == 3
        assert data["stats"]["attempts"] >= 3

    def test_generate_count_override(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=3)
        out_dir = tmp_path / "out"
        result = runner.invoke(
            app, ["generate", str(path), "-o", str(out_dir), "-n", "2", "--seed", "0"]
        )
        assert result.exit_code == 0, result.output
        assert (out_dir / "1.json").exists()
        assert not (out_dir / "2.json").exists()

    def test_generate_infeasible(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=7)
        out_dir = tmp_path / "out"
        result = runner.invoke(app, ["generate", str(path), "-o", str(out_dir)])
        assert result.exit_code == 4
        assert "Generation failed" in result.output
        assert not out_dir.exists()

    def test_generate_unknown_basis(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=2)
        result = runner.invoke(app, ["generate", str(path), "--basis", "global"])
        assert result.exit_code == 1
        assert "Unknown basis" in result.output

    def test_generate_report(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=3)
        result = runner.invoke(
            app,
            ["generate", str(path), "-o", str(tmp_path / "out"), "--seed", "5", "--report"],
        )
        assert result.exit_code == 0, result.output
        assert "Layer: hat" in result.output

    @pytest.mark.parametrize("value", ["-5", "0"])
    def test_generate_rejects_non_positive_max_attempts(self, tmp_path, value):
        path = _make_collection(tmp_path, LAYERS, count=2)
        out_dir = tmp_path / "out"
        result = runner.invoke(
            app, ["generate", str(path), "-o", str(out_dir), f"--max-attempts={value}"]
        )
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "--max-attempts must be positive" in result.output
        assert not out_dir.exists()

    def test_generate_non_positive_max_attempts_json(self, tmp_path):
        path = _make_collection(tmp_path, LAYERS, count=2)
        result = runner.invoke(
            app, ["--json", "generate", str(path), "--max-attempts=-5"]
        )
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["status"] == "error"
        assert "--max-attempts must be positive" in data["errors"][0]["message"]

    def test_generate_ignores_negative_max_attempts_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TRAITFORGE_MAX_ATTEMPTS", "-5")
        path = _make_collection(tmp_path, LAYERS, count=2)
        result = runner.invoke(
            app, ["generate", str(path), "-o", str(tmp_path / "out"), "--seed", "3"]
        )
        assert result.exit_code == 0, result.output


class TestConfigCommand:
    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Generation" in result.output
        assert "max_attempts" in result.output

    def test_config_set_and_reset(self):
        result = runner.invoke(app, ["config", "set", "generation.max_attempts", "500"])
        assert result.exit_code == 0
        saved = json.loads(config_module.CONFIG_FILE.read_text())
        assert saved["generation"]["max_attempts"] == 500

        result = runner.invoke(app, ["config", "reset"])
        assert result.exit_code == 0
        assert not config_module.CONFIG_FILE.exists()

    def test_config_set_invalid_key(self):
        result = runner.invoke(app, ["config", "set", "invalid.key", "value"])
        assert result.exit_code == 1
        assert "Unknown key" in result.output

    def test_config_set_invalid_int_value(self):
        result = runner.invoke(app, ["config", "set", "generation.max_attempts", "abc"])
        assert result.exit_code == 1
        assert "Invalid integer" in result.output

    def test_config_set_invalid_choice(self):
        result = runner.invoke(app, ["config", "set", "generation.budget_basis", "global"])
        assert result.exit_code == 1
        assert "Invalid value" in result.output

    def test_config_set_missing_args(self):
        result = runner.invoke(app, ["config", "set"])
        assert result.exit_code == 1

    def test_config_unknown_action(self):
        result = runner.invoke(app, ["config", "unknown_action"])
        assert result.exit_code == 1
        assert "Unknown action" in result.output
