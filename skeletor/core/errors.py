"""Error types raised by Skeletor.

Every error derives from ``SkeletorError`` so the CLI can report any of
them as a single readable line.
"""
from typing import List, Optional


class SkeletorError(Exception):
    """Base class for all Skeletor errors."""
    pass


class NotFoundError(SkeletorError):
    """A skeleton, repository or revision does not exist."""
    pass


class SkeletonNotFoundError(NotFoundError):
    """Raised when a skeleton cannot be found in a repository."""

    def __init__(self, name: str, repo_name: str = ""):
        self.name = name
        self.repo_name = repo_name
        if repo_name:
            message = f"skeleton {name!r} not found in repository {repo_name!r}"
        else:
            message = f"skeleton {name!r} not found"
        super().__init__(message)


class RepositoryNotFoundError(NotFoundError):
    """Raised when a qualified name references an unknown repository."""

    def __init__(self, repo_name: str):
        self.repo_name = repo_name
        super().__init__(f"no skeleton repository configured with name {repo_name!r}")


class RevisionNotFoundError(NotFoundError):
    """Raised when a remote revision cannot be resolved as ref, tag or branch."""

    def __init__(self, revision: str, repository: str):
        self.revision = revision
        self.repository = repository
        super().__init__(f"revision {revision!r} not found in repository {repository!r}")


class AmbiguousSkeletonError(SkeletorError):
    """Raised when an unqualified skeleton name matches several repositories."""

    def __init__(self, name: str, repositories: List[str]):
        self.name = name
        self.repositories = list(repositories)
        super().__init__(
            f"skeleton {name!r} found in multiple repositories: "
            f"{', '.join(self.repositories)}. "
            f"explicitly provide <repo-name>:{name} to select one"
        )


class InvalidRepositoryError(SkeletorError):
    """Raised for unparseable repository locations or invalid repository layouts."""
    pass


class RepositoryExistsError(SkeletorError):
    """Raised when creating a repository or skeleton that already exists."""
    pass


class SkeletonConfigError(SkeletorError):
    """Raised when a skeleton marker file cannot be parsed or is invalid."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"invalid skeleton config {path}: {reason}")


class DependencyCycleError(SkeletorError):
    """Raised when a skeleton's parent chain revisits a skeleton."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"dependency cycle detected for parent {reference}")


class ComposeError(SkeletorError):
    """Raised when skeletons cannot be composed."""
    pass


class ValuesError(SkeletorError):
    """Raised for malformed value files or --set expressions."""
    pass


class TemplateRenderError(SkeletorError):
    """Raised when a template has a syntax error or references an undefined value."""

    def __init__(self, template_name: str, message: str, lineno: Optional[int] = None):
        self.template_name = template_name
        self.lineno = lineno
        self.message = message
        location = template_name
        if lineno is not None:
            location = f"{template_name}:{lineno}"
        super().__init__(f"failed to render template {location}: {message}")


class PlanError(SkeletorError):
    """Base class for errors while building or applying a plan."""
    pass


class PlanOptionsError(PlanError, ValueError):
    """Raised for invalid plan options such as absolute skip paths."""
    pass


class EmptyRenderResultError(PlanError):
    """Raised when a templated filename renders to an empty string."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"templated filename {filename!r} resolved to an empty string")


class PathInjectionError(PlanError):
    """Raised when a rendered filename escapes its parent directory."""

    def __init__(self, filename: str, rendered: str):
        self.filename = filename
        self.rendered = rendered
        super().__init__(
            f"templated filename {filename!r} injected illegal directory traversal: {rendered}"
        )


class GitError(SkeletorError):
    """Base class for git failures."""
    pass


class GitCommandError(GitError):
    """Raised when a git command exits non-zero."""

    def __init__(self, args: List[str], returncode: int, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"git {' '.join(self.args_list)} failed with exit code {returncode}{detail}")


class NetworkTransientError(GitCommandError):
    """Raised when git failed because the remote was temporarily unreachable."""
    pass


class GitTimeoutError(GitError):
    """Raised when a git command exceeds its timeout."""

    def __init__(self, args: List[str], timeout: float):
        self.args_list = list(args)
        self.timeout = timeout
        super().__init__(f"git {' '.join(self.args_list)} timed out after {timeout}s")
