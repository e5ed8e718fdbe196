import logging
from pathlib import Path

import pytest

from prettydist.config import ConfigError, PostbuildConfig
from prettydist.errors import PassFailedError, PassOrderError, PipelineBusyError, RootNotFoundError
from prettydist.passes import normalize_extensions, prettify_urls, rewrite_references
from prettydist.pipeline import DEFAULT_PASSES, executor, find_dangling_references, run_pipeline, single_run_guard


def test_end_to_end_scenario(tmp_path: Path, write_tree, tree_listing) -> None:
    root = tmp_path / "dist"
    write_tree(
        root,
        {
            "about.html": "<h1>About us</h1>",
            "assets/img/hero.png.webp": b"webp-bytes",
            "index.html": '<img src="/assets/img/hero.png">',
        },
    )

    report = run_pipeline(PostbuildConfig(root=root))

    assert tree_listing(root) == {"about/index.html", "assets/img/hero.webp", "index.html"}
    assert (root / "about/index.html").read_text(encoding="utf-8") == "<h1>About us</h1>"
    assert (root / "assets/img/hero.webp").read_bytes() == b"webp-bytes"
    assert (root / "index.html").read_text(encoding="utf-8") == '<img src="/assets/img/hero.webp">'
    assert [item.name for item in report.passes] == list(DEFAULT_PASSES)


def test_mandated_order_leaves_no_dangling_references(site: Path, site_config: PostbuildConfig) -> None:
    run_pipeline(site_config)

    assert find_dangling_references(site_config) == []


def test_rewriting_before_normalizing_leaves_dangling_references(site: Path, site_config: PostbuildConfig) -> None:
    prettify_urls(site_config)
    rewrite_references(site_config)

    dangling = find_dangling_references(site_config)

    assert {item.reference for item in dangling} == {"/assets/img/hero.webp", "../assets/img/team.webp"}

    normalize_extensions(site_config)
    assert find_dangling_references(site_config) == []


def test_reordered_pass_selection_is_rejected(site: Path, site_config: PostbuildConfig, tree_listing) -> None:
    before = tree_listing(site)

    with pytest.raises(PassOrderError):
        run_pipeline(site_config, passes=["rewrite-refs", "normalize-extensions"])

    assert tree_listing(site) == before


def test_pass_subset_runs_only_selected_passes(site: Path, site_config: PostbuildConfig) -> None:
    report = run_pipeline(site_config, passes=["normalize-extensions"])

    assert [item.name for item in report.passes] == ["normalize-extensions"]
    assert (site / "about.html").exists()
    assert (site / "assets/img/hero.webp").exists()


def test_unknown_pass_is_a_config_error(site_config: PostbuildConfig) -> None:
    with pytest.raises(ConfigError):
        run_pipeline(site_config, passes=["minify"])


def test_missing_root_is_reported(tmp_path: Path) -> None:
    with pytest.raises(RootNotFoundError):
        run_pipeline(PostbuildConfig(root=tmp_path / "nope"))


def test_failure_aborts_remaining_passes_without_rollback(
    site: Path,
    site_config: PostbuildConfig,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    def denied(config, *, dry_run=False):
        raise PermissionError(13, "Permission denied", str(site / "assets/img/hero.png.webp"))

    monkeypatch.setitem(executor.PASSES, "normalize-extensions", denied)
    caplog.set_level(logging.INFO)

    with pytest.raises(PassFailedError) as exc:
        run_pipeline(site_config)

    assert exc.value.pass_name == "normalize-extensions"
    assert exc.value.kind == "permission-denied"
    assert (site / "about/index.html").exists()
    assert (site / "index.html").read_text(encoding="utf-8") == '<img src="/assets/img/hero.png">\n'
    assert "Postbuild error: normalize-extensions failed [permission-denied]" in caplog.text
    assert "Postbuild processing complete." not in caplog.text


def test_success_is_logged_once(site_config: PostbuildConfig, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    run_pipeline(site_config)

    assert caplog.text.count("Postbuild processing complete.") == 1


def test_concurrent_run_on_same_root_is_refused(site: Path, site_config: PostbuildConfig, tree_listing) -> None:
    before = tree_listing(site)

    with single_run_guard(site):
        with pytest.raises(PipelineBusyError):
            run_pipeline(site_config)

    assert tree_listing(site) == before


def test_lock_file_stays_outside_the_root(site: Path, site_config: PostbuildConfig) -> None:
    run_pipeline(site_config)

    assert not any(path.name.endswith(".lock") for path in site.rglob("*"))


def test_dry_run_reports_without_mutating(site: Path, site_config: PostbuildConfig, tree_listing) -> None:
    before = tree_listing(site)
    index_text = (site / "index.html").read_text(encoding="utf-8")

    report = run_pipeline(site_config, dry_run=True)

    assert report.dry_run is True
    assert tree_listing(site) == before
    assert (site / "index.html").read_text(encoding="utf-8") == index_text
    assert report.get("prettify-urls").changed == 2
    assert report.get("normalize-extensions").changed == 2
    rows = dict(report.summary_rows())
    assert rows["Mode"] == "dry-run"
