"""Storage layer for the short link mapping set."""

from .base import MappingStoreBase, StorageError
from .json_file import JSONFileMappingStore
from .models import ShortLink

__all__ = ["MappingStoreBase", "StorageError", "JSONFileMappingStore", "ShortLink"]
