"""Flat JSON file storage for the mapping set."""

import json
import logging
import os
import tempfile
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .base import MappingStoreBase, StorageError


class JSONFileMappingStore(MappingStoreBase):
    """Mapping set stored as one JSON object: ``{"<code>": "<url>", ...}``.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so a reader sees either the old or the new set.
    """

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        """Initialize JSON file store.

        Args:
            path: Path of the JSON file (need not exist yet)
            logger: Optional logger instance
        """
        self.path = path
        self.logger = logger or logging.getLogger(__name__)
        self._snapshot: Optional[Tuple[Tuple[int, int, int], Mapping[str, str]]] = None

    def read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            self.logger.debug(f"Mappings file {self.path} does not exist, starting empty")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read mappings from {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Mappings file {self.path} must contain a JSON object")

        mappings = {}
        for code, url in data.items():
            if not isinstance(url, str):
                raise StorageError(f"Mapping for '{code}' in {self.path} is not a string")
            key = code.lower()
            if key in mappings:
                raise StorageError(f"Duplicate short code '{key}' in {self.path}")
            mappings[key] = url

        return mappings

    def write(self, mappings: Mapping[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".mappings-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(dict(mappings), f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write mappings to {self.path}: {e}") from e

        self._snapshot = None
        self.logger.debug(f"Wrote {len(mappings)} mappings to {self.path}")

    def snapshot(self) -> Mapping[str, str]:
        """Read-only view, reloaded only when the file changes on disk."""
        try:
            stat = os.stat(self.path)
            version = (stat.st_ino, stat.st_mtime_ns, stat.st_size)
        except FileNotFoundError:
            version = (0, 0, 0)
        except OSError as e:
            raise StorageError(f"Failed to stat {self.path}: {e}") from e

        if self._snapshot is None or self._snapshot[0] != version:
            self._snapshot = (version, MappingProxyType(self.read()))
            self.logger.info(f"Loaded {len(self._snapshot[1])} mappings from {self.path}")

        return self._snapshot[1]
