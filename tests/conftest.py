from pathlib import Path

import pytest
from typer.testing import CliRunner

from prettydist.config import PostbuildConfig, settings


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("PRETTYDIST_ROOT", raising=False)
    monkeypatch.delenv("PRETTYDIST_LOG_LEVEL", raising=False)
    settings.get_environment.cache_clear()
    yield
    settings.get_environment.cache_clear()


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _write_tree(root: Path, files: dict) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def write_tree():
    return _write_tree


@pytest.fixture
def tree_listing():
    def _listing(root: Path) -> set:
        return {path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file()}

    return _listing


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    A small built site: two flat pages, an index, and optimizer artifacts.
    """
    root = tmp_path / "dist"
    _write_tree(
        root,
        {
            "index.html": '<img src="/assets/img/hero.png">\n',
            "about.html": '<h1>About</h1>\n<img src="../assets/img/team.jpg" alt="team">\n',
            "blog/post.html": "<p>Post</p>\n",
            "assets/img/hero.png.webp": b"hero-webp",
            "assets/img/team.jpg.webp": b"team-webp",
            "assets/img/logo.svg": "<svg/>",
        },
    )
    return root


@pytest.fixture
def site_config(site: Path) -> PostbuildConfig:
    return PostbuildConfig(root=site)
