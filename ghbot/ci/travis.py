"""Travis CI configuration analysis.

Decides whether a repository's ``.travis.yml`` only targets Go releases new
enough for the ``golang.org/x/lint/golint`` import path, and rewrites the old
import path.
"""

import logging
import re
from typing import Any, NamedTuple

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_MIN_GO_VERSION = "1.9"

_VERSION_PATTERN = re.compile(
    r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)


class TravisConfigError(ValueError):
    """Raised when a .travis.yml document cannot be interpreted."""


class TravisConfig(BaseModel):
    """The parts of a .travis.yml the bot cares about."""

    go_versions: list[str] = Field(
        default_factory=list, description="Entries of the top-level 'go' key"
    )


class GoVersion(NamedTuple):
    """A parsed Go release number.

    Compares like semantic versions: a prerelease sorts before its release.
    """

    major: int
    minor: int
    patch: int
    prerelease: str = ""

    def _key(self) -> tuple[int, int, int, int, tuple[Any, ...]]:
        pre: tuple[Any, ...] = ()
        if self.prerelease:
            pre = tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.prerelease.split(".")
            )
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, pre)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, GoVersion):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, GoVersion):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, GoVersion):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, GoVersion):
            return NotImplemented
        return self._key() >= other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        return text


def parse_version_tolerant(text: str) -> GoVersion:
    """Parse a Go version the way Travis users write them.

    Accepts ``1.9``, ``v1.10``, ``1.11.2`` and ``1.12.0-rc1``. Missing
    minor/patch parts default to 0.

    Args:
        text: Version string from the 'go' key

    Returns:
        Parsed GoVersion

    Raises:
        ValueError: For non-numeric versions such as 'tip', 'master' or '1.x'
    """
    value = str(text).strip()
    if value.startswith("v"):
        value = value[1:]

    match = _VERSION_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid Go version '{text}'")

    major, minor, patch, prerelease = match.groups()
    return GoVersion(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
        prerelease=prerelease or "",
    )


def parse_travis_config(text: str) -> TravisConfig:
    """Parse the 'go' versions out of a .travis.yml document.

    Scalars are loaded as strings so that ``1.10`` is not read as the float 1.1.

    Raises:
        TravisConfigError: If the YAML is invalid or not a mapping
    """
    try:
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise TravisConfigError(f"Invalid YAML: {e}") from e

    if data is None or data == "":
        return TravisConfig()
    if not isinstance(data, dict):
        raise TravisConfigError("Expected a mapping at the top level of .travis.yml")

    go = data.get("go")
    if go is None or go == "":
        versions: list[str] = []
    elif isinstance(go, list):
        versions = [str(v) for v in go if not isinstance(v, (dict, list))]
    elif isinstance(go, dict):
        raise TravisConfigError("The 'go' key must be a version or a list of versions")
    else:
        versions = [str(go)]

    return TravisConfig(go_versions=versions)


def check_valid_go_version(
    text: str, minimum: str = DEFAULT_MIN_GO_VERSION
) -> bool:
    """Check that every Go version a .travis.yml builds with is >= minimum.

    A file without a 'go' key qualifies. Any unparsable version, such as
    'tip', disqualifies the file, and so does invalid YAML.
    """
    minimum_version = parse_version_tolerant(minimum)

    try:
        config = parse_travis_config(text)
    except TravisConfigError as e:
        logger.warning(f"Could not parse .travis.yml: {e}")
        return False

    for value in config.go_versions:
        try:
            version = parse_version_tolerant(value)
        except ValueError:
            logger.debug(f"Go version {value!r} is not a release number")
            return False
        if minimum_version > version:
            logger.debug(f"Go version {value} is older than {minimum}")
            return False
    return True


def contains_import(text: str, old_import: str) -> bool:
    """Check whether the file still references the old import path."""
    return old_import in text


def fix_import_path(text: str, old_import: str, new_import: str) -> str:
    """Replace every occurrence of the old import path."""
    return text.replace(old_import, new_import)
