"""Project creation from resolved skeletons."""
from skeletor.project.extras import (
    DirectoryGitignoreProvider,
    DirectoryLicenseProvider,
    GitignoreTemplate,
    LicenseInfo,
)
from skeletor.project.filesystem import Filesystem, MemoryFilesystem, OSFilesystem
from skeletor.project.plan import (
    Destination,
    Operation,
    OpType,
    Plan,
    ProjectOptions,
    Stats,
    build_plan,
    create_project,
)

__all__ = [
    'Destination',
    'DirectoryGitignoreProvider',
    'DirectoryLicenseProvider',
    'Filesystem',
    'GitignoreTemplate',
    'LicenseInfo',
    'MemoryFilesystem',
    'OSFilesystem',
    'Operation',
    'OpType',
    'Plan',
    'ProjectOptions',
    'Stats',
    'build_plan',
    'create_project',
]
