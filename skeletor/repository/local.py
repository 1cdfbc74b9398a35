"""Skeleton repositories on the local filesystem."""
import os
from typing import List

from skeletor.core.errors import InvalidRepositoryError, SkeletonNotFoundError
from skeletor.core.logger import get_logger
from skeletor.models.refs import RepositoryReference, SkeletonReference
from skeletor.models.skeleton import is_skeleton_dir
from skeletor.repository.base import Source

logger = get_logger(__name__)


class LocalSource(Source):
    """A directory containing a ``skeletons/`` subdirectory."""

    def __init__(self, ref: RepositoryReference):
        self.ref = ref

    @property
    def root(self) -> str:
        return self.ref.local_path

    def get_skeleton(self, name: str) -> SkeletonReference:
        skeletons_path = os.path.abspath(self.ref.skeletons_path)
        path = os.path.abspath(os.path.join(skeletons_path, name))

        # Names like "../x" must not resolve outside of skeletons/
        if not name or os.path.commonpath([skeletons_path, path]) != skeletons_path or path == skeletons_path:
            raise SkeletonNotFoundError(name, self.ref.name)

        if not is_skeleton_dir(path):
            raise SkeletonNotFoundError(name, self.ref.name)

        return SkeletonReference(name=name, path=path, repo=self.ref)

    def list_skeletons(self) -> List[SkeletonReference]:
        skeletons_path = os.path.abspath(self.ref.skeletons_path)
        if not os.path.isdir(skeletons_path):
            raise InvalidRepositoryError(
                f"{self.ref.name or self.ref} is not a valid skeleton repository: "
                f"{skeletons_path} does not exist"
            )

        skeletons = self._find_skeletons(skeletons_path, "")
        return sorted(skeletons, key=lambda s: s.name)

    def _find_skeletons(self, directory: str, prefix: str) -> List[SkeletonReference]:
        found: List[SkeletonReference] = []

        try:
            entries = sorted(os.scandir(directory), key=lambda e: e.name)
        except PermissionError as e:
            logger.warning(f"Permission error, skipping dir: {e}")
            return found

        for entry in entries:
            if not entry.is_dir():
                continue

            name = os.path.join(prefix, entry.name) if prefix else entry.name

            if is_skeleton_dir(entry.path):
                # Nested directories belong to the skeleton itself
                found.append(SkeletonReference(name=name, path=os.path.abspath(entry.path), repo=self.ref))
                continue

            found.extend(self._find_skeletons(entry.path, name))

        return found

    def __repr__(self) -> str:
        return f"LocalSource({str(self.ref)!r})"
