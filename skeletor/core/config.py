"""Skeletor runtime configuration and settings."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


def _default_cache_dir() -> str:
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return str(Path(base) / "skeletor")


def _config_subdir(name: str) -> str:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return str(Path(base) / "skeletor" / name)


def parse_repository_map(raw: str) -> Dict[str, str]:
    """Parse ``name=url,name2=url2`` into a mapping.

    Raises:
        ValueError: If an entry is missing its name or url
    """
    repositories: Dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, url = entry.partition("=")
        if not sep or not name.strip() or not url.strip():
            raise ValueError(f"invalid repository entry {entry!r}, expected <name>=<url>")
        repositories[name.strip()] = url.strip()
    return repositories


@dataclass
class SkeletorConfig:
    """Runtime configuration for Skeletor operations.

    Attributes:
        cache_dir: Root directory for cached remote repositories
        git_timeout: Timeout in seconds for a single git invocation (default: 120)
        fetch_interval: Minimum age in seconds of a cached checkout before refs
            are fetched again (default: 60)
        default_revision: Revision checked out when a remote URL names none
        repositories: Configured skeleton repositories, name -> url
        project_host: Default project host exposed to templates
        project_owner: Default project owner exposed to templates
        license_dir: Directory of <key>.yaml license texts
        gitignore_dir: Directory of <name>.gitignore templates
    """

    cache_dir: str = field(default_factory=_default_cache_dir)
    git_timeout: int = 120
    fetch_interval: int = 60
    default_revision: str = "master"
    repositories: Dict[str, str] = field(default_factory=dict)
    project_host: str = "github.com"
    project_owner: str = ""
    license_dir: str = field(default_factory=lambda: _config_subdir("licenses"))
    gitignore_dir: str = field(default_factory=lambda: _config_subdir("gitignore"))

    @property
    def repository_cache_dir(self) -> Path:
        return Path(self.cache_dir) / "repositories"

    @classmethod
    def from_env(cls) -> "SkeletorConfig":
        """Create config from environment variables.

        Environment variables:
            SKELETOR_CACHE_DIR: Cache directory
            SKELETOR_GIT_TIMEOUT: Git command timeout in seconds
            SKELETOR_FETCH_INTERVAL: Ref fetch freshness window in seconds
            SKELETOR_DEFAULT_REVISION: Default remote revision
            SKELETOR_REPOSITORIES: Comma-separated name=url pairs
            SKELETOR_PROJECT_HOST: Default project host
            SKELETOR_PROJECT_OWNER: Default project owner
            SKELETOR_LICENSE_DIR: License text directory
            SKELETOR_GITIGNORE_DIR: Gitignore template directory

        Returns:
            SkeletorConfig instance with values from environment or defaults
        """
        return cls(
            cache_dir=os.getenv("SKELETOR_CACHE_DIR") or _default_cache_dir(),
            git_timeout=int(os.getenv("SKELETOR_GIT_TIMEOUT", cls.git_timeout)),
            fetch_interval=int(os.getenv("SKELETOR_FETCH_INTERVAL", cls.fetch_interval)),
            default_revision=os.getenv("SKELETOR_DEFAULT_REVISION") or cls.default_revision,
            repositories=parse_repository_map(os.getenv("SKELETOR_REPOSITORIES", "")),
            project_host=os.getenv("SKELETOR_PROJECT_HOST") or cls.project_host,
            project_owner=os.getenv("SKELETOR_PROJECT_OWNER", cls.project_owner),
            license_dir=os.getenv("SKELETOR_LICENSE_DIR") or _config_subdir("licenses"),
            gitignore_dir=os.getenv("SKELETOR_GITIGNORE_DIR") or _config_subdir("gitignore"),
        )


# Global config instance (can be overridden)
_config: Optional[SkeletorConfig] = None


def get_config() -> SkeletorConfig:
    """Get the global Skeletor configuration.

    Returns:
        SkeletorConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = SkeletorConfig.from_env()
    return _config


def set_config(config: Optional[SkeletorConfig]):
    """Set the global Skeletor configuration.

    Args:
        config: SkeletorConfig instance to use globally, or None to reload
            from the environment on next access
    """
    global _config
    _config = config
