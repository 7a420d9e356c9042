"""pkgurl: Package URL (purl) parser and builder."""

from .exceptions import BuildException, PackageURLError, ParsingException
from .purl import Builder, PackageURL, parse
from .types import KNOWN_TYPES, is_known_type

__all__ = [
    "BuildException",
    "Builder",
    "is_known_type",
    "KNOWN_TYPES",
    "PackageURL",
    "PackageURLError",
    "parse",
    "ParsingException",
]
