"""Synchronization of remote skeleton repositories into the local cache."""
import os
import shutil
import threading
import time
from typing import Callable, Dict, Hashable, Optional

from skeletor.core.config import get_config
from skeletor.core.errors import NetworkTransientError, RevisionNotFoundError
from skeletor.core.logger import get_logger
from skeletor.models.refs import RepositoryReference
from skeletor.services.git_client import GitClient

logger = get_logger(__name__)


class SyncRegistry:
    """Runs each synchronization at most once per process.

    Callers for the same key are serialized on a per-key lock. The first
    caller performs the work; every later caller observes the recorded
    outcome, success or the very same exception, without retrying.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._key_locks: Dict[Hashable, threading.Lock] = {}
        self._outcomes: Dict[Hashable, Optional[BaseException]] = {}

    def run_once(self, key: Hashable, func: Callable[[], None]) -> None:
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            if key in self._outcomes:
                error = self._outcomes[key]
            else:
                try:
                    func()
                    error = None
                except Exception as e:
                    error = e
                self._outcomes[key] = error

        if error is not None:
            raise error

    def attempted(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._outcomes

    def clear(self) -> None:
        with self._lock:
            self._key_locks.clear()
            self._outcomes.clear()


_registry = SyncRegistry()


def get_sync_registry() -> SyncRegistry:
    return _registry


def sync_key(ref: RepositoryReference):
    return (ref.url, ref.revision)


def sync_remote_once(ref: RepositoryReference, client: GitClient,
                     registry: Optional[SyncRegistry] = None) -> None:
    """Synchronize ref's cache unless this process already attempted it."""
    registry = registry or _registry
    registry.run_once(sync_key(ref), lambda: sync_remote(ref, client))


def sync_remote(ref: RepositoryReference, client: GitClient) -> None:
    """Bring the local cache of a remote repository up to date.

    Failure policy:
        - temporary network errors with an existing cache copy are logged
          as a warning and the stale cache is served
        - an unresolvable revision purges the cache directory and raises
          RevisionNotFoundError
        - everything else propagates

    Raises:
        RevisionNotFoundError: If the revision matches no ref, tag or branch
        GitError: For any other git failure
    """
    local_path = ref.local_path

    try:
        _update_cache(ref, client)
    except NetworkTransientError as e:
        if not os.path.exists(local_path):
            raise
        logger.warning(
            f"Failed to update local repository cache for {ref.url}, "
            f"using cached copy: {e.stderr or e}"
        )
    except RevisionNotFoundError:
        if os.path.exists(local_path):
            logger.info(f"Cleaning up repository cache {local_path}")
            try:
                shutil.rmtree(local_path)
            except OSError as cleanup_error:
                logger.error(f"Failed to clean up cache dir {local_path}: {cleanup_error}")
        raise


def _update_cache(ref: RepositoryReference, client: GitClient) -> None:
    local_path = ref.local_path

    if client.is_repository(local_path):
        logger.debug(f"Opened cached repository {local_path}")
        _fetch_if_stale(client, local_path)
    else:
        if os.path.exists(local_path):
            # Leftover from an interrupted clone
            logger.debug(f"Removing incomplete repository cache {local_path}")
            shutil.rmtree(local_path)
        client.clone(ref.url, local_path)

    if not ref.revision:
        return

    commit = client.resolve_revision(local_path, ref.revision)
    if commit is None:
        raise RevisionNotFoundError(ref.revision, ref.name or ref.url)

    client.checkout(local_path, commit)


def _fetch_if_stale(client: GitClient, path: str) -> None:
    """Fetch refs unless the checkout was refreshed within the freshness window."""
    age = time.time() - os.stat(path).st_mtime
    if age < get_config().fetch_interval:
        logger.debug(f"Refs in {path} fetched {age:.0f}s ago, skipping fetch")
        return

    client.fetch(path)

    now = time.time()
    os.utime(path, (now, now))
