"""Business logic service for short links."""

import logging
import random
from typing import List, Mapping, Optional

from .shortlink import (
    DEFAULT_MAX_ATTEMPTS,
    ExhaustionError,
    Resolution,
    RedirectTarget,
    NotFound,
    allocate,
    resolve,
)
from .storage.base import MappingStoreBase, StorageError
from .storage.models import ShortLink


class ShortLinkService:
    """Service layer tying the allocator and resolver to a mapping store."""

    def __init__(
        self,
        store: MappingStoreBase,
        logger: Optional[logging.Logger] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ):
        """Initialize short link service.

        Args:
            store: Mapping set storage
            logger: Optional logger
            max_attempts: Random draws per allocation before giving up
            rng: Optional random source for code generation
        """
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.max_attempts = max_attempts
        self.rng = rng

    def create_short_link(self, url: str) -> ShortLink:
        """Allocate a code for ``url`` and persist the updated mapping set.

        The code is only returned once the write succeeded.

        Args:
            url: Target URL (not validated here)

        Returns:
            The new short link

        Raises:
            ExhaustionError: If no free code was found; nothing is written
            StorageError: If reading or writing the mapping set failed
        """
        mappings = self.store.read()

        try:
            code = allocate(mappings, max_attempts=self.max_attempts, rng=self.rng)
        except ExhaustionError as e:
            self.logger.error(f"Short code space exhausted ({len(mappings)} mappings): {e}")
            raise

        updated = dict(mappings)
        updated[code] = url

        try:
            self.store.write(updated)
        except StorageError as e:
            self.logger.error(f"Failed to persist short link {code}: {e}")
            raise

        self.logger.info(f"Created short link: {code} -> {url}")
        return ShortLink(code=code, url=url)

    def resolve_path(self, path: str, mappings: Optional[Mapping[str, str]] = None) -> Resolution:
        """Resolve a request path against the current mapping set.

        Args:
            path: Request path, e.g. ``/ln/a1b2``
            mappings: Mapping set to use (store snapshot if not specified)

        Returns:
            RedirectTarget, NotFound or Invalid
        """
        if mappings is None:
            mappings = self.store.snapshot()

        result = resolve(path, mappings)

        if isinstance(result, RedirectTarget):
            self.logger.debug(f"Resolved {path} -> {result.url}")
        elif isinstance(result, NotFound):
            self.logger.warning(f"Short link not found: {result.code}")

        return result

    def list_links(self) -> List[ShortLink]:
        """List all short links, ordered by code."""
        mappings = self.store.snapshot()
        return [ShortLink(code=code, url=mappings[code]) for code in sorted(mappings)]

    def health_check(self) -> dict:
        """Perform health check.

        Returns:
            Dictionary with storage status and mapping count
        """
        healthy = self.store.health_check()
        count = len(self.store.snapshot()) if healthy else 0
        return {
            "storage": healthy,
            "mappings": count,
        }
