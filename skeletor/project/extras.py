"""Generated project files: LICENSE and .gitignore.

License and gitignore texts come from providers. The bundled providers read
them from local directories; anything with the same ``get`` method can be
plugged in instead.
"""
import datetime
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from skeletor.core.errors import NotFoundError
from skeletor.models.skeleton import SkeletonFile, generated_file

# Known placeholders in open source license texts, by field
PLACEHOLDERS = {
    "project": ["<program>"],
    "author": ["<name of author>", "[fullname]", "[name of copyright owner]"],
    "year": ["<year>", "[year]", "[yyyy]"],
}


class LicenseNotFoundError(NotFoundError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"license {key!r} not found")


class GitignoreNotFoundError(NotFoundError):
    def __init__(self, query: str):
        self.query = query
        super().__init__(f"gitignore template {query!r} not found")


@dataclass(frozen=True)
class LicenseInfo:
    key: str
    name: str
    body: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "name": self.name, "body": self.body}


@dataclass(frozen=True)
class GitignoreTemplate:
    query: str
    content: str


def resolve_placeholders(text: str, fields: Dict[str, str]) -> str:
    """Replace known license placeholders with the values in fields."""
    for field_name, replacement in fields.items():
        for placeholder in PLACEHOLDERS.get(field_name, []):
            text = text.replace(placeholder, replacement)
    return text


def license_file(info: LicenseInfo, project_name: str, owner: str,
                 year: Optional[int] = None) -> SkeletonFile:
    """Build the LICENSE file with project, author and year filled in."""
    if year is None:
        year = datetime.date.today().year
    text = resolve_placeholders(info.body, {
        "project": project_name,
        "author": owner,
        "year": str(year),
    })
    return generated_file("LICENSE", text)


def gitignore_file(template: GitignoreTemplate) -> SkeletonFile:
    return generated_file(".gitignore", template.content)


class LicenseProvider(ABC):
    @abstractmethod
    def get(self, key: str) -> LicenseInfo:
        """Return the license for key or raise LicenseNotFoundError."""
        pass


class GitignoreProvider(ABC):
    @abstractmethod
    def get(self, query: str) -> GitignoreTemplate:
        """Return the gitignore template for query or raise GitignoreNotFoundError."""
        pass


class DirectoryLicenseProvider(LicenseProvider):
    """Reads ``<key>.yaml`` files with ``name`` and ``body`` fields."""

    def __init__(self, directory: str):
        self.directory = directory

    def get(self, key: str) -> LicenseInfo:
        path = os.path.join(self.directory, f"{key}.yaml")
        if not key or os.sep in key or not os.path.isfile(path):
            raise LicenseNotFoundError(key)

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return LicenseInfo(key=key, name=data.get("name", key), body=data.get("body", ""))

    def list(self) -> List[str]:
        if not os.path.isdir(self.directory):
            return []
        return sorted(name[:-5] for name in os.listdir(self.directory) if name.endswith(".yaml"))


class DirectoryGitignoreProvider(GitignoreProvider):
    """Reads ``<name>.gitignore`` files.

    A query may name several templates separated by commas; they are
    concatenated under ``### <name> ###`` headers. Every name must exist.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def get(self, query: str) -> GitignoreTemplate:
        names = [name.strip() for name in query.split(",") if name.strip()]
        if not names:
            raise GitignoreNotFoundError(query)

        sections = []
        for name in names:
            path = os.path.join(self.directory, f"{name}.gitignore")
            if os.sep in name or not os.path.isfile(path):
                raise GitignoreNotFoundError(name)
            with open(path) as f:
                sections.append(f"### {name} ###\n{f.read().rstrip()}\n")

        return GitignoreTemplate(query=",".join(names), content="\n".join(sections))
