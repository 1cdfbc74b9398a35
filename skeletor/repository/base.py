"""Abstract base class for skeleton repository sources."""
from abc import ABC, abstractmethod
from typing import List

from skeletor.models.refs import SkeletonReference


class Source(ABC):
    """A place skeletons live."""

    @abstractmethod
    def get_skeleton(self, name: str) -> SkeletonReference:
        """Look up a skeleton by name.

        Args:
            name: Skeleton name, may contain path separators

        Returns:
            Reference to the skeleton

        Raises:
            SkeletonNotFoundError: If no such skeleton exists
        """
        pass

    @abstractmethod
    def list_skeletons(self) -> List[SkeletonReference]:
        """List all skeletons, sorted by name."""
        pass
