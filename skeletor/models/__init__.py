"""Data models for Skeletor."""
from skeletor.models.refs import (
    CONFIG_FILENAME,
    SKELETONS_DIR,
    ParentReference,
    RepositoryReference,
    SkeletonReference,
    parse_repo_ref,
)
from skeletor.models.skeleton import (
    TEMPLATE_EXTENSION,
    ResolvedSkeleton,
    SkeletonConfig,
    SkeletonFile,
)

__all__ = [
    'CONFIG_FILENAME',
    'SKELETONS_DIR',
    'TEMPLATE_EXTENSION',
    'ParentReference',
    'RepositoryReference',
    'SkeletonReference',
    'parse_repo_ref',
    'ResolvedSkeleton',
    'SkeletonConfig',
    'SkeletonFile',
]
