"""CI configuration analysis and rewriting."""

from .travis import (
    GoVersion,
    TravisConfig,
    TravisConfigError,
    check_valid_go_version,
    contains_import,
    fix_import_path,
    parse_travis_config,
    parse_version_tolerant,
)

__all__ = [
    "GoVersion",
    "TravisConfig",
    "TravisConfigError",
    "check_valid_go_version",
    "contains_import",
    "fix_import_path",
    "parse_travis_config",
    "parse_version_tolerant",
]
