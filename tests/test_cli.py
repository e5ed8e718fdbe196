from pathlib import Path

import pytest
from typer.testing import CliRunner

from prettydist import cli


def test_run_processes_the_tree(runner: CliRunner, site: Path) -> None:
    result = runner.invoke(cli.app, ["run", str(site)])

    assert result.exit_code == 0, result.output
    assert (site / "about/index.html").exists()
    assert (site / "blog/post/index.html").exists()
    assert (site / "assets/img/hero.webp").exists()
    assert "/assets/img/hero.webp" in (site / "index.html").read_text(encoding="utf-8")
    assert "Postbuild processing complete." in result.output


def test_run_dry_run_changes_nothing(runner: CliRunner, site: Path, tree_listing) -> None:
    before = tree_listing(site)

    result = runner.invoke(cli.app, ["run", str(site), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run complete." in result.output
    assert tree_listing(site) == before


def test_run_fails_for_missing_root(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["run", str(tmp_path / "missing")])

    assert result.exit_code == 1


def test_run_rejects_reordered_passes(runner: CliRunner, site: Path, tree_listing) -> None:
    before = tree_listing(site)

    result = runner.invoke(
        cli.app,
        ["run", str(site), "--only", "rewrite-refs", "--only", "normalize-extensions"],
    )

    assert result.exit_code == 1
    assert tree_listing(site) == before


def test_run_uses_root_from_environment(
    runner: CliRunner,
    site: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PRETTYDIST_ROOT", str(site))
    cli.get_environment.cache_clear()

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 0, result.output
    assert (site / "about/index.html").exists()


def test_run_reads_config_file(runner: CliRunner, site: Path, tmp_path: Path) -> None:
    config_path = tmp_path / "prettydist.toml"
    config_path.write_text(f'root = "{site.name}"\nskip_unchanged_writes = true\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert (site / "about/index.html").exists()


def test_run_reports_config_errors(runner: CliRunner, tmp_path: Path) -> None:
    config_path = tmp_path / "prettydist.toml"
    config_path.write_text('surprise = "key"\n', encoding="utf-8")

    result = runner.invoke(cli.app, ["run", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_audit_flags_dangling_references(runner: CliRunner, site: Path) -> None:
    (site / "index.html").write_text('<img src="/assets/img/gone.webp">', encoding="utf-8")

    result = runner.invoke(cli.app, ["audit", str(site)])

    assert result.exit_code == 1
    assert "gone.webp" in result.output


def test_audit_passes_after_run(runner: CliRunner, site: Path) -> None:
    assert runner.invoke(cli.app, ["run", str(site)]).exit_code == 0

    result = runner.invoke(cli.app, ["audit", str(site)])

    assert result.exit_code == 0, result.output
    assert "No dangling image references." in result.output


def test_show_config(runner: CliRunner, site: Path) -> None:
    result = runner.invoke(cli.app, ["show-config", str(site)])

    assert result.exit_code == 0, result.output
    assert "assets/img/" in result.output


def test_version_flag(runner: CliRunner) -> None:
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert "prettydist" in result.output
