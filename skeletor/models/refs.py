"""References to skeleton repositories, skeletons and parent skeletons."""
import os
from dataclasses import dataclass
from urllib.parse import parse_qs, quote, urlsplit, urlunsplit

from skeletor.core.config import get_config
from skeletor.core.errors import InvalidRepositoryError

# Subdirectory of a repository containing the skeletons
SKELETONS_DIR = "skeletons"

# Marker file whose presence makes a directory a skeleton
CONFIG_FILENAME = ".skeletor.yaml"


@dataclass(frozen=True)
class RepositoryReference:
    """Location of a skeleton repository.

    Exactly one of ``url`` (remote) or ``path`` (local) is set. Remote
    references also carry the revision to check out.
    """

    name: str = ""
    url: str = ""
    path: str = ""
    revision: str = ""

    @property
    def is_remote(self) -> bool:
        return bool(self.url)

    @property
    def location(self) -> str:
        """Identity of the repository location, independent of its name."""
        if self.is_remote:
            return f"{self.url}@{self.revision}"
        return self.local_path

    @property
    def local_path(self) -> str:
        """Path of the repository on disk.

        For remote repositories this is the deterministic cache directory
        derived from host, URL path and revision, so distinct revisions of
        the same repository never share a checkout.
        """
        if not self.is_remote:
            return os.path.abspath(self.path)

        parts = urlsplit(self.url)
        url_path = parts.path.strip("/") or "_"
        revision = quote(self.revision, safe="")
        cache_dir = get_config().repository_cache_dir
        return str(cache_dir / parts.netloc.rpartition("@")[2] / f"{url_path}@{revision}")

    @property
    def skeletons_path(self) -> str:
        return os.path.join(self.local_path, SKELETONS_DIR)

    def skeleton_path(self, name: str) -> str:
        return os.path.join(self.skeletons_path, name)

    def with_name(self, name: str) -> "RepositoryReference":
        return RepositoryReference(name=name, url=self.url, path=self.path, revision=self.revision)

    def __str__(self) -> str:
        if not self.is_remote:
            return self.path
        if not self.revision:
            return self.url
        return f"{self.url}?revision={quote(self.revision, safe='/')}"


def parse_repo_ref(raw: str, name: str = "") -> RepositoryReference:
    """Parse a repository location string.

    Strings whose URL has a non-empty host are remote git repositories, with
    an optional ``revision`` query parameter. Everything else, including
    ``file://`` URLs, is a local path. ``~`` is expanded.

    Raises:
        InvalidRepositoryError: If raw is empty or cannot be parsed
    """
    if not raw or not raw.strip():
        raise InvalidRepositoryError("repository location must not be empty")

    try:
        parts = urlsplit(raw)
    except ValueError as e:
        raise InvalidRepositoryError(f"invalid repository URL {raw!r}: {e}") from e

    if not parts.netloc or parts.scheme == "file":
        path = parts.path if parts.scheme == "file" else raw
        if not path:
            raise InvalidRepositoryError(f"invalid repository URL {raw!r}: empty path")
        return RepositoryReference(name=name, path=os.path.expanduser(path))

    try:
        query = parse_qs(parts.query, strict_parsing=bool(parts.query))
    except ValueError as e:
        raise InvalidRepositoryError(f"invalid URL query {parts.query!r}: {e}") from e

    revision = (query.get("revision") or [""])[0] or get_config().default_revision
    url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))

    return RepositoryReference(name=name, url=url, revision=revision)


@dataclass(frozen=True)
class SkeletonReference:
    """Location of a single skeleton inside a repository."""

    name: str
    path: str
    repo: RepositoryReference

    @property
    def config_path(self) -> str:
        return os.path.join(self.path, CONFIG_FILENAME)

    def __str__(self) -> str:
        if not self.repo.name:
            return self.name
        return f"{self.repo.name}:{self.name}"


@dataclass(frozen=True)
class ParentReference:
    """Parent declared in a skeleton's marker file.

    An empty ``repository_url`` means the parent lives in the same
    repository as the child.
    """

    skeleton_name: str
    repository_url: str = ""

    def __str__(self) -> str:
        if not self.repository_url:
            return self.skeleton_name
        return f"{self.repository_url}:{self.skeleton_name}"

