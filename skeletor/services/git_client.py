"""Git operations for the remote repository cache."""
import os
import re
import subprocess
from typing import List, Optional

from skeletor.core.config import get_config
from skeletor.core.errors import (
    GitCommandError,
    GitTimeoutError,
    NetworkTransientError,
)
from skeletor.core.logger import get_logger

logger = get_logger(__name__)

# stderr fragments git prints when the remote is temporarily unreachable
_TRANSIENT_PATTERNS = re.compile(
    r"could not resolve host"
    r"|temporary failure in name resolution"
    r"|name or service not known"
    r"|connection timed out"
    r"|operation timed out"
    r"|connection refused"
    r"|connection reset"
    r"|network is unreachable"
    r"|no route to host"
    r"|failed to connect"
    r"|the remote end hung up unexpectedly"
    r"|early eof"
    r"|http/2 stream \d+ was not closed cleanly"
    r"|gnutls_handshake\(\) failed"
    r"|ssl_connect",
    re.IGNORECASE,
)

FETCH_REFSPECS = [
    "+refs/heads/*:refs/heads/*",
    "+refs/heads/*:refs/remotes/origin/*",
    "+refs/tags/*:refs/tags/*",
]


def is_transient(stderr: str) -> bool:
    """Return True if git's error output describes a temporary network failure."""
    return bool(stderr) and bool(_TRANSIENT_PATTERNS.search(stderr))


class GitClient:
    """Runs git commands against local checkouts of remote repositories.

    Every command is bounded by ``timeout`` seconds; exceeding it raises
    GitTimeoutError instead of hanging.
    """

    def __init__(self, timeout: Optional[float] = None, git: str = "git"):
        self.timeout = timeout if timeout is not None else get_config().git_timeout
        self.git = git

    def _run(self, args: List[str], cwd: Optional[str] = None) -> str:
        cmd = [self.git] + args
        env = dict(os.environ, GIT_TERMINAL_PROMPT="0")

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise GitTimeoutError(args, self.timeout) from e
        except FileNotFoundError as e:
            raise GitCommandError(args, 127, "git executable not found") from e

        if result.returncode != 0:
            if is_transient(result.stderr):
                raise NetworkTransientError(args, result.returncode, result.stderr)
            raise GitCommandError(args, result.returncode, result.stderr)

        return result.stdout

    def is_repository(self, path: str) -> bool:
        """Check whether path is the top level of a git work tree."""
        if not os.path.isdir(os.path.join(path, ".git")):
            return False

        try:
            toplevel = self._run(["rev-parse", "--show-toplevel"], cwd=path).strip()
        except GitCommandError:
            return False

        return os.path.realpath(toplevel) == os.path.realpath(path)

    def clone(self, url: str, path: str) -> None:
        """Clone url into path."""
        logger.debug(f"Cloning remote repository {url} to {path}")
        os.makedirs(os.path.dirname(path), exist_ok=True)
        self._run(["clone", "--quiet", "--", url, path])

    def fetch(self, path: str) -> None:
        """Fetch all branches and tags from origin.

        Local branches are force-updated as well, so a plain branch name
        resolves to the fetched commit. HEAD is detached after checkout,
        so updating the branch it was cloned on is safe.
        """
        logger.debug(f"Fetching refs {FETCH_REFSPECS} in {path}")
        self._run(["fetch", "--quiet", "--force", "--prune", "--update-head-ok", "origin"] + FETCH_REFSPECS, cwd=path)

    def resolve_revision(self, path: str, revision: str) -> Optional[str]:
        """Resolve revision to a commit hash.

        Tries the plain revision (commit hash or local ref), then the tag,
        then the remote-tracking branch. The first form that resolves wins.

        Returns:
            Commit hash, or None if no form resolves
        """
        candidates = [
            revision,
            f"refs/tags/{revision}",
            f"refs/remotes/origin/{revision}",
        ]

        for candidate in candidates:
            try:
                output = self._run(
                    ["rev-parse", "--verify", "--quiet", f"{candidate}^{{commit}}"],
                    cwd=path,
                )
            except GitCommandError:
                continue

            commit = output.strip()
            if commit:
                logger.debug(f"Resolved revision {candidate} to {commit}")
                return commit

        return None

    def checkout(self, path: str, commit: str) -> None:
        """Force-checkout commit, discarding local changes."""
        logger.debug(f"Checking out commit {commit} in {path}")
        self._run(["checkout", "--quiet", "--force", "--detach", commit], cwd=path)

    def init(self, path: str) -> bool:
        """Initialize a repository at path unless one already exists.

        Returns:
            True if a new repository was created
        """
        if self.is_repository(path):
            return False
        logger.debug(f"Initializing git repository {path}")
        self._run(["init", "--quiet", path])
        return True
