"""Filesystems a plan can be applied to.

``OSFilesystem`` writes to disk. ``MemoryFilesystem`` keeps everything in a
dict and backs dry runs, so applying a plan has a single code path.
"""
import os
import stat
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional


class Filesystem(ABC):
    """Minimal set of filesystem operations used by plans."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        pass

    @abstractmethod
    def makedirs(self, path: str, mode: int = 0o755) -> None:
        """Create path and any missing ancestors. Existing dirs are fine."""
        pass

    @abstractmethod
    def write_bytes(self, path: str, data: bytes, mode: int = 0o644) -> None:
        """Write data to path, replacing existing content. Parent must exist."""
        pass

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        pass

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        pass

    @abstractmethod
    def get_mode(self, path: str) -> int:
        """Permission bits of path."""
        pass


class OSFilesystem(Filesystem):
    """The real filesystem."""

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def makedirs(self, path: str, mode: int = 0o755) -> None:
        os.makedirs(path, mode=mode, exist_ok=True)

    def write_bytes(self, path: str, data: bytes, mode: int = 0o644) -> None:
        with open(path, "wb") as f:
            f.write(data)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def get_mode(self, path: str) -> int:
        return stat.S_IMODE(os.stat(path).st_mode)


@dataclass
class _Node:
    is_dir: bool
    mode: int
    data: bytes = b""


class MemoryFilesystem(Filesystem):
    """In-memory filesystem for dry runs and tests.

    Paths are normalized absolute paths. The root and any ``base`` paths
    passed in are treated as existing directories.
    """

    def __init__(self, *base_dirs: str):
        self._nodes: Dict[str, _Node] = {}
        self._lock = threading.Lock()
        for base in (os.sep,) + base_dirs:
            self._nodes[self._key(base)] = _Node(is_dir=True, mode=0o755)

    @staticmethod
    def _key(path: str) -> str:
        return os.path.normpath(os.path.abspath(path))

    def _node(self, path: str) -> Optional[_Node]:
        return self._nodes.get(self._key(path))

    def exists(self, path: str) -> bool:
        return self._node(path) is not None

    def is_dir(self, path: str) -> bool:
        node = self._node(path)
        return node is not None and node.is_dir

    def makedirs(self, path: str, mode: int = 0o755) -> None:
        key = self._key(path)
        with self._lock:
            missing: List[str] = []
            current = key
            while current not in self._nodes:
                missing.append(current)
                parent = os.path.dirname(current)
                if parent == current:
                    break
                current = parent

            existing = self._nodes.get(current)
            if existing is not None and not existing.is_dir:
                raise NotADirectoryError(current)

            for missing_path in reversed(missing):
                self._nodes[missing_path] = _Node(is_dir=True, mode=mode)

    def write_bytes(self, path: str, data: bytes, mode: int = 0o644) -> None:
        key = self._key(path)
        with self._lock:
            parent = self._nodes.get(os.path.dirname(key))
            if parent is None:
                raise FileNotFoundError(os.path.dirname(key))
            if not parent.is_dir:
                raise NotADirectoryError(os.path.dirname(key))

            node = self._nodes.get(key)
            if node is not None and node.is_dir:
                raise IsADirectoryError(key)
            if node is None:
                self._nodes[key] = _Node(is_dir=False, mode=mode, data=bytes(data))
            else:
                node.data = bytes(data)

    def chmod(self, path: str, mode: int) -> None:
        node = self._node(path)
        if node is None:
            raise FileNotFoundError(path)
        node.mode = stat.S_IMODE(mode)

    def read_bytes(self, path: str) -> bytes:
        node = self._node(path)
        if node is None:
            raise FileNotFoundError(path)
        if node.is_dir:
            raise IsADirectoryError(path)
        return node.data

    def get_mode(self, path: str) -> int:
        node = self._node(path)
        if node is None:
            raise FileNotFoundError(path)
        return node.mode

    def paths(self) -> List[str]:
        """All paths currently present, sorted."""
        return sorted(self._nodes)
