"""Tests for creating local repositories and skeletons."""
import pytest

from skeletor.core.errors import InvalidRepositoryError, RepositoryExistsError
from skeletor.core.loader import load_skeleton
from skeletor.models.refs import parse_repo_ref
from skeletor.project import ProjectOptions, build_plan
from skeletor.repository import open_repository
from skeletor.repository.create import create_repository, create_repository_with_skeleton, create_skeleton


class TestCreateRepository:
    def test_creates_skeletons_dir(self, tmp_path):
        ref = create_repository(str(tmp_path / "repo"))
        assert (tmp_path / "repo" / "skeletons").is_dir()
        assert not ref.is_remote

    def test_existing_path(self, tmp_path):
        with pytest.raises(RepositoryExistsError):
            create_repository(str(tmp_path))

    def test_remote_rejected(self):
        with pytest.raises(InvalidRepositoryError):
            create_repository("https://github.com/acme/skeletons")


class TestCreateSkeleton:
    def test_example_skeleton_is_usable(self, tmp_path):
        create_repository_with_skeleton(str(tmp_path / "repo"), "default")

        skeleton = load_skeleton(open_repository(str(tmp_path / "repo")), "default")
        plan = build_plan(skeleton, ProjectOptions(name="widget", target_dir=str(tmp_path / "out")))
        plan.apply()

        readme = (tmp_path / "out" / "README.md").read_text()
        assert readme.startswith("# widget\n")
        assert "License" not in readme

    def test_nested_name(self, tmp_path):
        ref = create_repository(str(tmp_path / "repo"))
        path = create_skeleton(ref, "go/cli")
        assert path == str((tmp_path / "repo" / "skeletons" / "go" / "cli").resolve())

    def test_duplicate(self, tmp_path):
        ref = create_repository(str(tmp_path / "repo"))
        create_skeleton(ref, "default")
        with pytest.raises(RepositoryExistsError):
            create_skeleton(ref, "default")

    @pytest.mark.parametrize("name", ["", "  ", "../escape", "."])
    def test_invalid_names(self, tmp_path, name):
        ref = create_repository(str(tmp_path / "repo"))
        with pytest.raises(InvalidRepositoryError):
            create_skeleton(ref, name)

    def test_missing_repository(self, tmp_path):
        with pytest.raises(InvalidRepositoryError):
            create_skeleton(parse_repo_ref(str(tmp_path / "missing")), "default")
