"""Tests for local skeleton repositories."""
import pytest

from skeletor.core.errors import InvalidRepositoryError, SkeletonNotFoundError
from skeletor.models.refs import parse_repo_ref
from skeletor.repository import LocalSource, open_repository


class TestLocalSource:
    """Test lookup and listing in local repositories."""

    def test_get_skeleton(self, sample_repo):
        source = LocalSource(parse_repo_ref(str(sample_repo), name="default"))
        ref = source.get_skeleton("base")

        assert ref.name == "base"
        assert ref.path == str(sample_repo / "skeletons" / "base")
        assert ref.repo.name == "default"

    def test_nested_name(self, repo_dir, make_skeleton):
        make_skeleton(repo_dir, "go/cli")
        source = LocalSource(parse_repo_ref(str(repo_dir)))
        assert source.get_skeleton("go/cli").name == "go/cli"

    def test_missing_skeleton(self, sample_repo):
        source = LocalSource(parse_repo_ref(str(sample_repo), name="default"))
        with pytest.raises(SkeletonNotFoundError) as exc_info:
            source.get_skeleton("nope")
        assert exc_info.value.repo_name == "default"

    def test_dir_without_marker_is_not_skeleton(self, repo_dir):
        (repo_dir / "skeletons" / "plain").mkdir()
        with pytest.raises(SkeletonNotFoundError):
            LocalSource(parse_repo_ref(str(repo_dir))).get_skeleton("plain")

    @pytest.mark.parametrize("name", ["../repo", "", "."])
    def test_names_outside_skeletons_dir(self, sample_repo, name):
        with pytest.raises(SkeletonNotFoundError):
            LocalSource(parse_repo_ref(str(sample_repo))).get_skeleton(name)

    def test_list_skeletons(self, repo_dir, make_skeleton):
        make_skeleton(repo_dir, "zeta")
        make_skeleton(repo_dir, "go/cli")
        make_skeleton(repo_dir, "go/lib", files={"nested/": ""})
        # Marker files below a skeleton do not make nested skeletons
        make_skeleton(repo_dir, "go/lib/nested")
        (repo_dir / "skeletons" / "empty").mkdir()

        names = [s.name for s in LocalSource(parse_repo_ref(str(repo_dir))).list_skeletons()]

        assert names == ["go/cli", "go/lib", "zeta"]

    def test_list_without_skeletons_dir(self, tmp_path):
        with pytest.raises(InvalidRepositoryError):
            LocalSource(parse_repo_ref(str(tmp_path))).list_skeletons()


class TestOpenRepository:
    """Test source caching."""

    def test_same_location_reuses_source(self, sample_repo):
        assert open_repository(str(sample_repo), "a") is open_repository(str(sample_repo), "a")

    def test_local_path_opens_local_source(self, sample_repo):
        assert isinstance(open_repository(str(sample_repo)), LocalSource)
