"""Scaffolding for new local skeleton repositories and skeletons."""
import os
from pathlib import Path

from skeletor.core.errors import InvalidRepositoryError, RepositoryExistsError
from skeletor.core.logger import get_logger
from skeletor.models.refs import CONFIG_FILENAME, RepositoryReference, parse_repo_ref

logger = get_logger(__name__)

# Files written into every newly created skeleton
SKELETON_FILES = {
    CONFIG_FILENAME: """---
# description: |
#   Some optional description of the skeleton that might be helpful to users.
# parent:
#   skeletonName: base
#   repositoryURL: https://github.com/acme/skeletons?revision=main
# values:
#   myVar: 'myValue'
#   other:
#     someVar: false
""",
    "README.md.skel": """# {{ Project.Name }}
{% if License %}
![GitHub](https://img.shields.io/github/license/{{ Project.Owner }}/{{ Project.Name }}?color=orange)

## License

The source code of {{ Project.Name }} is released under the {{ License.name }}. See the bundled
LICENSE file for details.
{% endif %}
""",
}


def create_repository(path: str) -> RepositoryReference:
    """Create an empty local skeleton repository at path.

    Raises:
        InvalidRepositoryError: If path references a remote repository
        RepositoryExistsError: If path already exists
    """
    ref = parse_repo_ref(path)
    if ref.is_remote:
        raise InvalidRepositoryError("creating remote repositories is not supported")

    local_path = Path(ref.local_path)
    if local_path.exists():
        raise RepositoryExistsError(f"cannot create local repository: path {str(local_path)!r} already exists")

    logger.info(f"Creating skeleton repository {local_path}")
    Path(ref.skeletons_path).mkdir(parents=True, mode=0o755)

    return ref


def create_skeleton(ref: RepositoryReference, name: str) -> str:
    """Create a skeleton with example files in a local repository.

    Returns:
        Path of the new skeleton directory

    Raises:
        InvalidRepositoryError: For remote or missing repositories, or bad names
        RepositoryExistsError: If the skeleton already exists
    """
    if not name or not name.strip():
        raise InvalidRepositoryError("skeleton name must not be empty")

    if ref.is_remote:
        raise InvalidRepositoryError("creating skeletons in remote repositories is not supported")

    local_path = Path(ref.local_path)
    if not local_path.exists():
        raise InvalidRepositoryError(f"cannot create skeleton: local repository {str(local_path)!r} does not exist")

    skeletons_path = Path(ref.skeletons_path).resolve()
    path = Path(os.path.normpath(skeletons_path / name))
    if skeletons_path not in path.parents:
        raise InvalidRepositoryError(f"invalid skeleton name {name!r}")

    if path.exists():
        raise RepositoryExistsError(f"skeleton {name!r} already exists in repository {ref.name or str(ref)!r}")

    logger.info(f"Creating skeleton directory {path}")
    path.mkdir(parents=True, mode=0o755)

    for filename in sorted(SKELETON_FILES):
        file_path = path / filename
        logger.debug(f"Creating skeleton file {file_path}")
        file_path.write_text(SKELETON_FILES[filename])
        file_path.chmod(0o644)

    return str(path)


def create_repository_with_skeleton(path: str, skeleton_name: str) -> RepositoryReference:
    """Create a new local repository seeded with one skeleton."""
    ref = create_repository(path)
    create_skeleton(ref, skeleton_name)
    return ref
