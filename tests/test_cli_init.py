"""Unit tests for navguard.cli.init_cmd: the 'navguard init' command."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from navguard.cli.app import app
from navguard.cli.init_cmd import _SAMPLE_CONFIG, _SAMPLE_DESTINATIONS
from navguard.config import NavGuardConfig
from navguard.pages.catalog import DestinationCatalog, validate_catalog

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("NAVGUARD_BASE_URL", "NAVGUARD_BROWSER", "NAVGUARD_HEADLESS"):
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# 1. Directory structure creation
# ---------------------------------------------------------------------------

class TestInitDirectoryStructure:
    """navguard init should create the .navguard/ project."""

    def test_creates_project_files(self, tmp_path: Path):
        result = runner.invoke(app, ["init", "--dir", str(tmp_path)])
        assert result.exit_code == 0, result.output
        project_dir = tmp_path / ".navguard"
        assert (project_dir / "config.yaml").is_file()
        assert (project_dir / "destinations.yaml").is_file()
        assert (project_dir / "evidence").is_dir()

    def test_refuses_to_overwrite_without_force(self, tmp_path: Path):
        (tmp_path / ".navguard").mkdir()
        result = runner.invoke(app, ["init", "--dir", str(tmp_path)])
        assert result.exit_code == 2
        assert not (tmp_path / ".navguard" / "config.yaml").exists()

    def test_force_overwrites(self, tmp_path: Path):
        project_dir = tmp_path / ".navguard"
        project_dir.mkdir()
        (project_dir / "config.yaml").write_text("browser: netscape\n", encoding="utf-8")
        result = runner.invoke(app, ["init", "--dir", str(tmp_path), "--force"])
        assert result.exit_code == 0
        assert (project_dir / "config.yaml").read_text(encoding="utf-8") == _SAMPLE_CONFIG


# ---------------------------------------------------------------------------
# 2. Sample content is usable as-is
# ---------------------------------------------------------------------------

class TestSampleContent:

    def test_sample_config_loads(self, tmp_path: Path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(_SAMPLE_CONFIG, encoding="utf-8")
        cfg = NavGuardConfig.from_file(config_file)
        assert cfg.base_url == "http://localhost:3000"
        assert cfg.destinations_file == tmp_path / "destinations.yaml"
        assert cfg.poll_interval == 0.25

    def test_sample_catalog_has_no_errors(self):
        data = yaml.safe_load(_SAMPLE_DESTINATIONS)
        assert [i for i in validate_catalog(data) if i["severity"] == "error"] == []

    def test_sample_catalog_loads(self):
        catalog = DestinationCatalog.from_dict(yaml.safe_load(_SAMPLE_DESTINATIONS))
        assert catalog.resolve("preferences").name == "Settings"


# ---------------------------------------------------------------------------
# 3. Global options
# ---------------------------------------------------------------------------

class TestGlobalOptions:

    def test_version(self):
        from navguard import __version__

        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
