"""Project plans: what to write where, computed before touching the disk.

A plan is built from a resolved skeleton and project options. Building only
reads the target filesystem to classify operations. ``Plan.apply`` performs
the writes against any ``Filesystem``, real or in-memory.
"""
import os
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from skeletor.core.config import get_config
from skeletor.core.errors import (
    EmptyRenderResultError,
    PathInjectionError,
    PlanError,
    PlanOptionsError,
)
from skeletor.core.loader import compose_skeletons
from skeletor.core.logger import get_logger
from skeletor.core.template import render
from skeletor.core.values import merge_values
from skeletor.models.skeleton import (
    TEMPLATE_EXTENSION,
    ResolvedSkeleton,
    SkeletonFile,
    merge_files,
)
from skeletor.project.extras import (
    GitignoreTemplate,
    LicenseInfo,
    gitignore_file,
    license_file,
)
from skeletor.project.filesystem import Filesystem, OSFilesystem

logger = get_logger(__name__)


class OpType(Enum):
    """Classification of a planned operation."""
    CREATE = "create"
    OVERWRITE = "overwrite"
    SKIP_EXISTING = "skip existing"
    SKIP_USER = "skip"

    @property
    def is_skip(self) -> bool:
        return self in (OpType.SKIP_EXISTING, OpType.SKIP_USER)


class Stats(Counter):
    """Number of operations per OpType."""

    def __str__(self) -> str:
        return (
            f"Created: {self[OpType.CREATE]}, "
            f"Overwritten: {self[OpType.OVERWRITE]}, "
            f"Skipped: {self[OpType.SKIP_USER] + self[OpType.SKIP_EXISTING]}"
        )


@dataclass(frozen=True)
class Destination:
    """Where a file ends up: project root plus path relative to it."""
    base: str
    path: str

    @property
    def abs_path(self) -> str:
        return os.path.join(self.base, self.path)

    def exists(self, fs: Filesystem) -> bool:
        return fs.exists(self.abs_path)


@dataclass(frozen=True)
class Operation:
    type: OpType
    source: SkeletonFile
    destination: Destination


@dataclass
class ProjectOptions:
    """Everything about the new project that is not part of the skeleton.

    Attributes:
        name: Project name, exposed to templates as ``Project.Name``
        target_dir: Directory the project is written to
        host: Project host, e.g. github.com
        owner: Project owner, e.g. an SCM user or organization
        values: Overrides merged on top of the skeleton's values
        license: License to write to LICENSE, if any
        gitignore: Template to write to .gitignore, if any
        overwrite_all: Overwrite every existing file
        overwrite_files: Paths (or parent dirs) that may be overwritten
        skip_files: Paths (or parent dirs) that are never written
        year: Copyright year for the license, defaults to the current year
    """
    name: str
    target_dir: str
    host: str = ""
    owner: str = ""
    values: Dict[str, Any] = field(default_factory=dict)
    license: Optional[LicenseInfo] = None
    gitignore: Optional[GitignoreTemplate] = None
    overwrite_all: bool = False
    overwrite_files: List[str] = field(default_factory=list)
    skip_files: List[str] = field(default_factory=list)
    year: Optional[int] = None

    def __post_init__(self):
        if not self.host:
            self.host = get_config().project_host
        if not self.owner:
            self.owner = get_config().project_owner


def build_render_context(options: ProjectOptions, values: Dict[str, Any]) -> Dict[str, Any]:
    """Build the namespaces exposed to templates.

    ``Project`` holds project identity, ``Values`` the merged skeleton and
    user values, ``License`` the license info or None.
    """
    license_name = options.license.name if options.license else ""
    gitignore_query = options.gitignore.query if options.gitignore else ""

    return {
        "Project": {
            "Name": options.name,
            "Host": options.host,
            "Owner": options.owner,
            "URL": f"https://{options.host}/{options.owner}/{options.name}",
            "GoPackagePath": f"{options.host}/{options.owner}/{options.name}",
            "License": license_name,
            "Gitignore": gitignore_query,
        },
        "Values": values,
        "License": options.license,
    }


def _clean_rel_paths(paths: Iterable[str], option: str) -> Set[str]:
    cleaned = set()
    for path in paths:
        if os.path.isabs(path):
            raise PlanOptionsError(f"found illegal absolute path in {option}: {path}")
        cleaned.add(os.path.normpath(path))
    return cleaned


def _parent_dir(rel_path: str) -> str:
    return os.path.dirname(rel_path) or "."


def matches_prefix(paths: Set[str], rel_path: str) -> bool:
    """Return True if rel_path or any of its parent dirs is in paths.

    E.g. for ``pkg/foo/bar`` this matches ``pkg``, ``pkg/foo`` and
    ``pkg/foo/bar``.
    """
    path = rel_path
    while path not in ("", ".", os.sep):
        if path in paths:
            return True
        path = os.path.dirname(path)
    return False


class Plan:
    """An ordered list of classified operations. Apply it once."""

    def __init__(self, operations: List[Operation], context: Dict[str, Any]):
        self.operations = operations
        self.context = context
        self.counts = Stats(op.type for op in operations)
        self._applied = False

    @property
    def is_noop(self) -> bool:
        """True if the plan neither creates nor overwrites anything."""
        return self.counts[OpType.CREATE] == 0 and self.counts[OpType.OVERWRITE] == 0

    @property
    def skips_existing(self) -> bool:
        return self.counts[OpType.SKIP_EXISTING] > 0

    def apply(self, fs: Optional[Filesystem] = None) -> Stats:
        """Write the plan to fs.

        Writes happen in plan order and are not rolled back if one fails.

        Returns:
            Stats with the number of operations per type

        Raises:
            PlanError: If the plan was already applied
            TemplateRenderError: If a template file fails to render
        """
        if self._applied:
            raise PlanError("plan was already applied")
        self._applied = True

        fs = fs or OSFilesystem()
        stats = Stats()

        for op in self.operations:
            self._execute(op, fs)
            stats[op.type] += 1

        return stats

    def _execute(self, op: Operation, fs: Filesystem) -> None:
        if op.type.is_skip:
            logger.debug(f"Skipping {op.destination.path} ({op.type.value})")
            return

        source = op.source
        dest = op.destination.abs_path

        if source.is_dir:
            logger.debug(f"Creating directory {dest}")
            fs.makedirs(dest, source.permissions)
            return

        fs.makedirs(os.path.dirname(dest), 0o755)

        content = source.read_bytes()
        if source.is_template:
            rendered = render(content.decode("utf-8"), self.context, name=source.rel_path)
            content = rendered.encode("utf-8")

        logger.debug(f"Writing {dest} ({op.type.value})")
        fs.write_bytes(dest, content, source.permissions)
        fs.chmod(dest, source.permissions)


class PlanBuilder:
    """Turns a resolved skeleton and project options into a Plan."""

    def __init__(self, skeleton: ResolvedSkeleton, options: ProjectOptions,
                 fs: Optional[Filesystem] = None):
        self.skeleton = skeleton
        self.options = options
        self.fs = fs or OSFilesystem()
        self.skip_paths = _clean_rel_paths(options.skip_files, "skip files")
        self.overwrite_paths = _clean_rel_paths(options.overwrite_files, "overwrite files")
        self.dir_rewrites: Dict[str, str] = {}
        self.context: Dict[str, Any] = {}

    def build(self) -> Plan:
        values = merge_values(self.skeleton.values, self.options.values)
        self.context = build_render_context(self.options, values)
        self.dir_rewrites = {}

        operations = []
        for source in self._sources():
            destination = self._destination(source)
            op_type = self._classify(destination)
            operations.append(Operation(type=op_type, source=source, destination=destination))

        plan = Plan(operations, self.context)
        logger.debug(f"Built plan for {self.skeleton}: {plan.counts}")
        return plan

    def _sources(self) -> List[SkeletonFile]:
        extras: List[SkeletonFile] = []
        if self.options.license is not None:
            extras.append(license_file(
                self.options.license, self.options.name, self.options.owner, self.options.year,
            ))
        if self.options.gitignore is not None:
            extras.append(gitignore_file(self.options.gitignore))

        sources = merge_files(self.skeleton.files, extras, mark_inherited=False)

        # Directories must be planned before their contents so that their
        # rendered names are known when the contents are placed.
        return sorted(sources, key=lambda f: f.rel_path)

    def _destination(self, source: SkeletonFile) -> Destination:
        rel_path = source.rel_path
        src_filename = os.path.basename(rel_path)
        src_dir = _parent_dir(rel_path)

        filename = render(src_filename, self.context, name=src_filename)
        if not filename:
            raise EmptyRenderResultError(src_filename)

        target_dir = self.dir_rewrites.get(src_dir, src_dir)
        target_path = os.path.normpath(os.path.join(target_dir, filename))

        if os.path.isabs(filename) or _parent_dir(target_path) != target_dir:
            raise PathInjectionError(src_filename, filename)

        if target_path.endswith(TEMPLATE_EXTENSION):
            target_path = target_path[:-len(TEMPLATE_EXTENSION)]

        if source.is_dir and target_path != rel_path:
            self.dir_rewrites[rel_path] = target_path

        return Destination(base=self.options.target_dir, path=target_path)

    def _classify(self, destination: Destination) -> OpType:
        if matches_prefix(self.skip_paths, destination.path):
            return OpType.SKIP_USER

        if not destination.exists(self.fs):
            return OpType.CREATE

        if self.options.overwrite_all or matches_prefix(self.overwrite_paths, destination.path):
            return OpType.OVERWRITE

        return OpType.SKIP_EXISTING


def build_plan(skeleton: ResolvedSkeleton, options: ProjectOptions,
               fs: Optional[Filesystem] = None) -> Plan:
    """Build the plan for creating a project from skeleton.

    Args:
        skeleton: Resolved (or composed) skeleton
        options: Project options
        fs: Filesystem used to check which destinations exist

    Raises:
        EmptyRenderResultError: If a templated filename renders empty
        PathInjectionError: If a templated filename escapes its directory
        TemplateRenderError: If a filename template fails to render
        PlanOptionsError: If skip or overwrite paths are absolute
    """
    return PlanBuilder(skeleton, options, fs).build()


def create_project(skeletons: Sequence[ResolvedSkeleton], options: ProjectOptions,
                   fs: Optional[Filesystem] = None) -> Stats:
    """Compose skeletons, build the plan and apply it in one go."""
    plan = build_plan(compose_skeletons(skeletons), options, fs)
    return plan.apply(fs)
