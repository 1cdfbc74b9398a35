"""Shared test fixtures for Skeletor tests."""
import shutil
from pathlib import Path

import pytest
import yaml

from skeletor.core.config import SkeletorConfig, set_config
from skeletor.models.refs import CONFIG_FILENAME
from skeletor.repository import clear_source_cache

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    """Point cache and data dirs into tmp_path and reset process-wide caches."""
    config = SkeletorConfig(
        cache_dir=str(tmp_path / "cache"),
        license_dir=str(tmp_path / "licenses"),
        gitignore_dir=str(tmp_path / "gitignore"),
        project_owner="acme",
    )
    set_config(config)
    clear_source_cache()
    yield config
    set_config(None)
    clear_source_cache()


def write_skeleton(repo: Path, name: str, config=None, files=None) -> Path:
    """Create a skeleton below repo/skeletons.

    Args:
        repo: Repository root
        name: Skeleton name, may contain slashes
        config: Marker file content as dict (None writes an empty file)
        files: Mapping of relative path to content; paths ending in "/"
            create directories
    """
    path = repo / "skeletons" / name
    path.mkdir(parents=True, exist_ok=True)
    (path / CONFIG_FILENAME).write_text(yaml.safe_dump(config) if config else "")

    for rel_path, content in (files or {}).items():
        target = path / rel_path
        if rel_path.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    return path


@pytest.fixture
def repo_dir(tmp_path):
    """An empty local skeleton repository."""
    repo = tmp_path / "repo"
    (repo / "skeletons").mkdir(parents=True)
    return repo


@pytest.fixture
def sample_repo(repo_dir):
    """Repository with a base skeleton and an advanced skeleton inheriting it."""
    write_skeleton(repo_dir, "base", {"values": {"greeting": "hello", "app": {"port": 80}}}, {
        "README.md.skel": "# {{ Project.Name }}\n",
        "shared.txt": "from base\n",
    })
    write_skeleton(repo_dir, "advanced", {
        "description": "Advanced skeleton",
        "parent": {"skeletonName": "base"},
        "values": {"app": {"debug": True}},
    }, {
        "app.go": "package main\n",
        "shared.txt": "from advanced\n",
    })
    return repo_dir


@pytest.fixture
def make_skeleton():
    """Factory fixture wrapping write_skeleton."""
    return write_skeleton
