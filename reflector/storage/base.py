"""Abstract base class for mapping set storage implementations."""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Dict, Mapping

from ..shortlink import ShortLinkError


class StorageError(ShortLinkError):
    """Reading or writing the mapping set failed."""


class MappingStoreBase(ABC):
    """Abstract base class for mapping set storage.

    The mapping set is always read and written as a whole; there is no
    partial update or merge.
    """

    @abstractmethod
    def read(self) -> Dict[str, str]:
        """Read the full mapping set.

        Returns:
            Fresh dictionary of code -> URL (safe to mutate)

        Raises:
            StorageError: If the stored data cannot be read
        """
        pass

    @abstractmethod
    def write(self, mappings: Mapping[str, str]) -> None:
        """Replace the stored mapping set with ``mappings``.

        Args:
            mappings: Complete mapping set to persist

        Raises:
            StorageError: If the data could not be persisted
        """
        pass

    def snapshot(self) -> Mapping[str, str]:
        """Get a read-only view of the mapping set for resolvers.

        Returns:
            Read-only mapping of code -> URL
        """
        return MappingProxyType(self.read())

    def health_check(self) -> bool:
        """Check if the stored mapping set is readable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            self.read()
        except StorageError:
            return False
        return True
