"""Skeleton repositories backed by a remote git repository."""
from typing import List, Optional

from skeletor.core.errors import InvalidRepositoryError
from skeletor.models.refs import RepositoryReference, SkeletonReference
from skeletor.repository.base import Source
from skeletor.repository.local import LocalSource
from skeletor.repository.sync import SyncRegistry, sync_remote_once
from skeletor.services.git_client import GitClient


class RemoteSource(Source):
    """Serves skeletons from the local cache of a remote git repository.

    The cache is synchronized lazily before the first lookup. Synchronization
    is attempted at most once per process for each (url, revision).
    """

    def __init__(
        self,
        ref: RepositoryReference,
        client: Optional[GitClient] = None,
        registry: Optional[SyncRegistry] = None,
    ):
        if not ref.is_remote:
            raise InvalidRepositoryError(f"{ref} is not a remote repository")
        self.ref = ref
        self.client = client or GitClient()
        self.registry = registry
        self.local = LocalSource(ref)

    def sync(self) -> None:
        """Synchronize the cache, reusing the outcome of an earlier attempt."""
        sync_remote_once(self.ref, self.client, self.registry)

    def get_skeleton(self, name: str) -> SkeletonReference:
        self.sync()
        return self.local.get_skeleton(name)

    def list_skeletons(self) -> List[SkeletonReference]:
        self.sync()
        return self.local.list_skeletons()

    def __repr__(self) -> str:
        return f"RemoteSource({str(self.ref)!r})"
