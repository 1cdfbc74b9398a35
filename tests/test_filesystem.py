"""Tests for the in-memory and OS filesystems."""
import pytest

from skeletor.project.filesystem import MemoryFilesystem, OSFilesystem


class TestMemoryFilesystem:
    """Test MemoryFilesystem semantics."""

    def test_root_and_base_dirs_exist(self):
        fs = MemoryFilesystem("/srv/project")
        assert fs.is_dir("/")
        assert fs.is_dir("/srv/project")
        assert not fs.exists("/srv/other")

    def test_makedirs_creates_ancestors(self):
        fs = MemoryFilesystem()
        fs.makedirs("/a/b/c", 0o700)

        assert fs.is_dir("/a")
        assert fs.is_dir("/a/b/c")
        assert fs.get_mode("/a/b/c") == 0o700

    def test_makedirs_existing_is_fine(self):
        fs = MemoryFilesystem()
        fs.makedirs("/a")
        fs.makedirs("/a")
        assert fs.paths() == ["/", "/a"]

    def test_write_requires_parent(self):
        fs = MemoryFilesystem()
        with pytest.raises(FileNotFoundError):
            fs.write_bytes("/missing/file", b"x")

    def test_write_read_chmod(self):
        fs = MemoryFilesystem()
        fs.makedirs("/a")
        fs.write_bytes("/a/f", b"one")
        fs.write_bytes("/a/f", b"two")
        fs.chmod("/a/f", 0o600)

        assert fs.read_bytes("/a/f") == b"two"
        assert fs.get_mode("/a/f") == 0o600
        assert not fs.is_dir("/a/f")

    def test_file_in_the_way(self):
        fs = MemoryFilesystem()
        fs.makedirs("/a")
        fs.write_bytes("/a/f", b"x")

        with pytest.raises(NotADirectoryError):
            fs.makedirs("/a/f/g")
        with pytest.raises(IsADirectoryError):
            fs.write_bytes("/a", b"x")

    def test_paths_normalized(self):
        fs = MemoryFilesystem()
        fs.makedirs("/a/./b/../c")
        assert fs.exists("/a/c")


class TestOSFilesystem:
    def test_roundtrip(self, tmp_path):
        fs = OSFilesystem()
        fs.makedirs(str(tmp_path / "a" / "b"))
        fs.write_bytes(str(tmp_path / "a" / "b" / "f"), b"data")
        fs.chmod(str(tmp_path / "a" / "b" / "f"), 0o640)

        assert fs.read_bytes(str(tmp_path / "a" / "b" / "f")) == b"data"
        assert fs.get_mode(str(tmp_path / "a" / "b" / "f")) == 0o640
        assert fs.is_dir(str(tmp_path / "a"))
