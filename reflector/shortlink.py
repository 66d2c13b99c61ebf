"""Short code allocation and redirect resolution."""

import random
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Union


SHORT_PATH_PREFIX = "/ln"
CODE_LENGTH = 4
CODE_SPACE = 0x10000  # 0000-ffff
DEFAULT_MAX_ATTEMPTS = 100

_SHORT_PATH = re.compile(r"^/ln/([0-9a-fA-F]{1,4})$")


class ShortLinkError(Exception):
    """Base error for short link operations."""


class ExhaustionError(ShortLinkError):
    """No free short code was found within the attempt budget."""

    def __init__(self, attempts: int):
        super().__init__(f"Unable to generate unique short code after {attempts} attempts")
        self.attempts = attempts


@dataclass(frozen=True)
class RedirectTarget:
    """Resolved short link: redirect the client to ``url``."""

    url: str
    status_code: int = 302


@dataclass(frozen=True)
class NotFound:
    """Well-formed short path whose code has no mapping."""

    code: str


@dataclass(frozen=True)
class Invalid:
    """Path is not a short link path at all."""

    path: str


Resolution = Union[RedirectTarget, NotFound, Invalid]


def generate_code(rng: Optional[random.Random] = None) -> str:
    """Draw a random 4-digit lowercase hex code.

    Args:
        rng: Optional random source (module-level random if not specified)

    Returns:
        Code in the range 0000-ffff
    """
    rng = rng or random
    return f"{rng.randrange(CODE_SPACE):0{CODE_LENGTH}x}"


def allocate(
    existing_mappings: Mapping[str, str],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a short code that is not yet a key of ``existing_mappings``.

    The mapping set is only read; the caller inserts the new entry and
    persists it.

    Args:
        existing_mappings: Current mapping set (code -> URL)
        max_attempts: Maximum number of random draws
        rng: Optional random source

    Returns:
        Unused 4-digit lowercase hex code

    Raises:
        ExhaustionError: If every draw collided with an existing code
    """
    attempts = 0
    while attempts < max_attempts:
        attempts += 1
        code = generate_code(rng)
        if code not in existing_mappings:
            return code

    raise ExhaustionError(attempts)


def resolve(path: str, mappings: Mapping[str, str]) -> Resolution:
    """Resolve a request path of the form ``/ln/<1-4 hex digits>``.

    The code is lower-cased and matched literally, so ``/ln/4ac`` does not
    reach a stored ``04ac``.

    Args:
        path: Raw request path (no query string)
        mappings: Mapping set to look the code up in

    Returns:
        RedirectTarget, NotFound or Invalid
    """
    match = _SHORT_PATH.match(path or "")
    if not match:
        return Invalid(path)

    code = match.group(1).lower()
    url = mappings.get(code)
    if url is None:
        return NotFound(code)

    return RedirectTarget(url)


def short_path(code: str) -> str:
    """Build the request path a short code is served under."""
    return f"{SHORT_PATH_PREFIX}/{code}"
