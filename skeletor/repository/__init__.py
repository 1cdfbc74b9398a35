"""Skeleton repositories: local directories, remote git repositories and
aggregations of both.

Opened sources are cached per process keyed by (name, location) so that
repeated lookups, e.g. while resolving parent skeletons, reuse the same
instance.
"""
import threading
from typing import Dict, Mapping, Tuple

from skeletor.core.errors import InvalidRepositoryError
from skeletor.models.refs import RepositoryReference, parse_repo_ref
from skeletor.repository.base import Source
from skeletor.repository.local import LocalSource
from skeletor.repository.remote import RemoteSource
from skeletor.repository.resolver import RepositoryResolver, split_name
from skeletor.repository.sync import SyncRegistry, get_sync_registry

_source_cache: Dict[Tuple[str, str], Source] = {}
_source_cache_lock = threading.Lock()


def open_ref(ref: RepositoryReference) -> Source:
    """Create (or reuse) the Source for a repository reference."""
    key = (ref.name, ref.location)

    with _source_cache_lock:
        source = _source_cache.get(key)
        if source is None:
            source = RemoteSource(ref) if ref.is_remote else LocalSource(ref)
            _source_cache[key] = source

    return source


def open_repository(url: str, name: str = "") -> Source:
    """Open the repository at url, which may be a local path or remote URL."""
    return open_ref(parse_repo_ref(url, name=name))


def open_repositories(repositories: Mapping[str, str]) -> RepositoryResolver:
    """Open several named repositories behind a single resolver."""
    sources: Dict[str, Source] = {}
    for name, url in repositories.items():
        if not name:
            raise InvalidRepositoryError(
                f"repository with url {url} was configured with an empty name, please fix your config"
            )
        sources[name] = open_repository(url, name=name)

    return RepositoryResolver(sources)


def clear_source_cache() -> None:
    """Forget all opened sources and recorded sync outcomes."""
    with _source_cache_lock:
        _source_cache.clear()
    get_sync_registry().clear()


__all__ = [
    'LocalSource',
    'RemoteSource',
    'RepositoryResolver',
    'Source',
    'SyncRegistry',
    'clear_source_cache',
    'open_ref',
    'open_repository',
    'open_repositories',
    'split_name',
]
