"""Skeleton loading and parent-chain merging."""
import os
from functools import reduce
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from skeletor.core.errors import ComposeError, DependencyCycleError
from skeletor.core.logger import get_logger
from skeletor.core.values import merge_values
from skeletor.models.refs import (
    CONFIG_FILENAME,
    ParentReference,
    RepositoryReference,
    SkeletonReference,
    parse_repo_ref,
)
from skeletor.models.skeleton import (
    ResolvedSkeleton,
    SkeletonConfig,
    SkeletonFile,
    merge_files,
)
from skeletor.repository import Source, open_ref

logger = get_logger(__name__)

# (repository location, skeleton name)
VisitKey = Tuple[str, str]


def load_skeleton(source: Source, name: str) -> ResolvedSkeleton:
    """Look up a skeleton by name in source and load it with all parents."""
    return load_skeleton_ref(source.get_skeleton(name))


def load_skeletons(source: Source, names: Iterable[str]) -> List[ResolvedSkeleton]:
    """Load several skeletons from the same source."""
    return [load_skeleton(source, name) for name in names]


def load_skeleton_ref(ref: SkeletonReference) -> ResolvedSkeleton:
    """Load the skeleton at ref and merge its parent chain beneath it.

    Raises:
        DependencyCycleError: If the parent chain revisits a skeleton
        SkeletonConfigError: If a marker file is invalid
        NotFoundError: If a parent skeleton or repository cannot be found
    """
    return _load(ref, frozenset([_visit_key(ref.repo, ref.name)]))


def _visit_key(repo: RepositoryReference, name: str) -> VisitKey:
    return (repo.location, os.path.normpath(name))


def _load(ref: SkeletonReference, visited: FrozenSet[VisitKey]) -> ResolvedSkeleton:
    config = SkeletonConfig.load(ref.config_path)

    skeleton = ResolvedSkeleton(
        description=config.description,
        values=config.values,
        files=collect_files(ref),
        reference=ref,
    )

    if config.parent is None:
        return skeleton

    parent_repo = resolve_parent_repository(ref, config.parent)
    key = _visit_key(parent_repo, config.parent.skeleton_name)
    if key in visited:
        raise DependencyCycleError(f"{parent_repo.name or parent_repo}:{config.parent.skeleton_name}")

    logger.debug(f"Loading parent {config.parent} of skeleton {ref}")
    parent_ref = open_ref(parent_repo).get_skeleton(config.parent.skeleton_name)
    parent = _load(parent_ref, visited | {key})

    return merge_skeletons(parent, skeleton)


def resolve_parent_repository(child: SkeletonReference, parent: ParentReference) -> RepositoryReference:
    """Work out which repository a parent skeleton lives in.

    Without an explicit URL the parent shares the child's repository.
    Relative local paths are resolved against the child repository's root.
    """
    if not parent.repository_url:
        return child.repo

    repo = parse_repo_ref(parent.repository_url)
    if repo.is_remote or os.path.isabs(repo.path):
        return repo

    path = os.path.normpath(os.path.join(child.repo.local_path, repo.path))
    return RepositoryReference(path=path)


def collect_files(ref: SkeletonReference) -> Tuple[SkeletonFile, ...]:
    """Collect every file and directory of a skeleton except its marker file."""
    root = os.path.abspath(ref.path)
    files: List[SkeletonFile] = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for entry in dirnames + sorted(filenames):
            if entry == CONFIG_FILENAME:
                continue

            abs_path = os.path.join(dirpath, entry)
            files.append(SkeletonFile(
                rel_path=os.path.relpath(abs_path, root),
                abs_path=abs_path,
                mode=os.stat(abs_path).st_mode,
            ))

    files.sort(key=lambda f: f.rel_path)
    return tuple(files)


def merge_skeletons(base: ResolvedSkeleton, override: ResolvedSkeleton) -> ResolvedSkeleton:
    """Merge override on top of base.

    Values merge recursively, files merge by relative path with override
    winning. Description and reference come from override; base becomes the
    parent of the result.
    """
    return ResolvedSkeleton(
        description=override.description,
        values=merge_values(base.values, override.values),
        files=merge_files(base.files, override.files),
        reference=override.reference,
        parent=base,
    )


def compose_skeletons(skeletons: Sequence[ResolvedSkeleton]) -> ResolvedSkeleton:
    """Compose independent skeletons left to right, later ones winning.

    A single skeleton is returned unchanged.

    Raises:
        ComposeError: If skeletons is empty
    """
    if not skeletons:
        raise ComposeError("cannot compose empty list of skeletons")

    if len(skeletons) == 1:
        return skeletons[0]

    return reduce(merge_skeletons, skeletons)


def find_file(skeleton: ResolvedSkeleton, rel_path: str) -> Optional[SkeletonFile]:
    """Return the file at rel_path in a resolved skeleton, if any."""
    rel_path = os.path.normpath(rel_path)
    for f in skeleton.files:
        if f.rel_path == rel_path:
            return f
    return None
