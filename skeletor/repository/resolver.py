"""Aggregation of several named repositories behind one Source."""
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Tuple

from skeletor.core.errors import (
    AmbiguousSkeletonError,
    InvalidRepositoryError,
    RepositoryNotFoundError,
    SkeletonNotFoundError,
)
from skeletor.core.logger import get_logger
from skeletor.models.refs import SkeletonReference
from skeletor.repository.base import Source
from skeletor.repository.remote import RemoteSource

logger = get_logger(__name__)


def split_name(qualified_name: str) -> Tuple[str, str]:
    """Split ``repo:skeleton`` into its parts; repo is empty when absent."""
    repo_name, sep, skeleton_name = qualified_name.partition(":")
    if not sep:
        return "", qualified_name
    return repo_name, skeleton_name


class RepositoryResolver(Source):
    """Looks up skeletons across named repositories.

    Repositories are traversed in lexicographic order of their names.
    """

    def __init__(self, sources: Dict[str, Source]):
        if not sources:
            raise InvalidRepositoryError("no skeleton repositories configured")

        for name in sources:
            if not name:
                raise InvalidRepositoryError(
                    "repository configured with an empty name, please fix your config"
                )

        self.sources = dict(sources)
        self.names = sorted(self.sources)

    def get_skeleton(self, name: str) -> SkeletonReference:
        """Resolve ``name`` or ``repo:name``.

        Raises:
            RepositoryNotFoundError: If the repo prefix is unknown
            SkeletonNotFoundError: If no repository has the skeleton
            AmbiguousSkeletonError: If more than one repository has it
        """
        repo_name, skeleton_name = split_name(name)

        if repo_name:
            source = self.sources.get(repo_name)
            if source is None:
                raise RepositoryNotFoundError(repo_name)
            return source.get_skeleton(skeleton_name)

        candidates: List[SkeletonReference] = []
        seen: List[str] = []

        for source_name in self.names:
            try:
                skeleton = self.sources[source_name].get_skeleton(skeleton_name)
            except SkeletonNotFoundError:
                continue

            candidates.append(skeleton)
            seen.append(source_name)

        if not candidates:
            raise SkeletonNotFoundError(skeleton_name)

        if len(candidates) > 1:
            raise AmbiguousSkeletonError(skeleton_name, seen)

        return candidates[0]

    def list_skeletons(self) -> List[SkeletonReference]:
        skeletons: List[SkeletonReference] = []
        for source_name in self.names:
            skeletons.extend(self.sources[source_name].list_skeletons())
        return skeletons

    def prefetch(self, max_workers: int = 4) -> None:
        """Synchronize all remote repositories in parallel.

        Errors are re-raised for the first failing repository in name order.
        """
        remotes = [self.sources[n] for n in self.names if isinstance(self.sources[n], RemoteSource)]
        if not remotes:
            return

        logger.debug(f"Prefetching {len(remotes)} remote repositories")

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(remote.sync) for remote in remotes]

        for future in futures:
            future.result()
