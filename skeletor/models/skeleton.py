"""Skeleton data model: marker config, files and resolved skeletons."""
import os
import stat
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from skeletor.core.errors import SkeletonConfigError
from skeletor.models.refs import CONFIG_FILENAME, ParentReference, SkeletonReference

# Files ending in this extension are rendered and written without it
TEMPLATE_EXTENSION = ".skel"


@dataclass
class SkeletonConfig:
    """Contents of a skeleton's marker file."""
    description: str = ""
    parent: Optional[ParentReference] = None
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[dict], path: str = CONFIG_FILENAME) -> "SkeletonConfig":
        """Build a config from parsed YAML.

        Raises:
            SkeletonConfigError: If a field has the wrong shape
        """
        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise SkeletonConfigError(path, "top level must be a mapping")

        description = data.get("description") or ""
        if not isinstance(description, str):
            raise SkeletonConfigError(path, "description must be a string")

        values = data.get("values") or {}
        if not isinstance(values, dict):
            raise SkeletonConfigError(path, "values must be a mapping")

        parent = None
        parent_data = data.get("parent")
        if parent_data is not None:
            if not isinstance(parent_data, dict):
                raise SkeletonConfigError(path, "parent must be a mapping")
            skeleton_name = parent_data.get("skeletonName") or ""
            if not isinstance(skeleton_name, str) or not skeleton_name.strip():
                raise SkeletonConfigError(path, "parent.skeletonName must not be empty")
            repository_url = parent_data.get("repositoryURL") or ""
            if not isinstance(repository_url, str):
                raise SkeletonConfigError(path, "parent.repositoryURL must be a string")
            parent = ParentReference(skeleton_name=skeleton_name, repository_url=repository_url)

        return cls(description=description, parent=parent, values=values)

    @classmethod
    def load(cls, path: str) -> "SkeletonConfig":
        """Load a marker file from disk."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise SkeletonConfigError(path, str(e)) from e
        except yaml.YAMLError as e:
            raise SkeletonConfigError(path, f"invalid YAML: {e}") from e

        return cls.from_dict(data, path)


def is_skeleton_dir(path: str) -> bool:
    """Return True if path is a directory containing the marker file."""
    return os.path.isdir(path) and os.path.isfile(os.path.join(path, CONFIG_FILENAME))


@dataclass(frozen=True)
class SkeletonFile:
    """A file or directory contributed by a skeleton.

    Attributes:
        rel_path: Path relative to the skeleton root (or project root for
            generated files)
        abs_path: Absolute source path on disk, empty for generated files
        mode: ``st_mode`` of the source including the file type bits
        inherited: True if the file comes from an ancestor skeleton
        content: In-memory content for generated files
    """
    rel_path: str
    abs_path: str = ""
    mode: int = stat.S_IFREG | 0o644
    inherited: bool = False
    content: Optional[bytes] = None

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)

    @property
    def is_template(self) -> bool:
        return not self.is_dir and self.rel_path.endswith(TEMPLATE_EXTENSION)

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        with open(self.abs_path, "rb") as f:
            return f.read()

    def as_inherited(self) -> "SkeletonFile":
        return replace(self, inherited=True)


def generated_file(rel_path: str, content, permissions: int = 0o644) -> SkeletonFile:
    """Create an in-memory file such as a LICENSE or .gitignore."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return SkeletonFile(rel_path=rel_path, mode=stat.S_IFREG | permissions, content=content)


def merge_files(base: Sequence[SkeletonFile], override: Sequence[SkeletonFile],
                mark_inherited: bool = True) -> Tuple[SkeletonFile, ...]:
    """Merge two file lists keyed by relative path.

    Files in override win. Files only present in base are kept and, when
    mark_inherited is set, flagged as inherited. The result is sorted by
    relative path.
    """
    files: Dict[str, SkeletonFile] = {}

    for f in base:
        files[f.rel_path] = f.as_inherited() if mark_inherited else f

    for f in override:
        files[f.rel_path] = f

    return tuple(files[path] for path in sorted(files))


@dataclass(frozen=True)
class ResolvedSkeleton:
    """A skeleton with its parent chain fully merged in.

    ``reference`` is None for skeletons produced by composing several
    independent skeletons.
    """
    description: str = ""
    values: Dict[str, Any] = field(default_factory=dict)
    files: Tuple[SkeletonFile, ...] = ()
    reference: Optional[SkeletonReference] = None
    parent: Optional["ResolvedSkeleton"] = None

    @property
    def name(self) -> str:
        if self.reference is None:
            return "<anonymous-skeleton>"
        return str(self.reference)

    def chain(self) -> List["ResolvedSkeleton"]:
        """Return the skeleton and its ancestors, root ancestor first."""
        chain: List[ResolvedSkeleton] = []
        current: Optional[ResolvedSkeleton] = self
        while current is not None:
            chain.append(current)
            current = current.parent
        chain.reverse()
        return chain

    def __str__(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent}->{self.name}"
