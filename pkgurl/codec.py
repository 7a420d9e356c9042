"""Percent-encoding helpers for the individual purl components.

Decoding is strict: a stray ``%`` or a byte sequence that is not UTF-8 is an
error rather than being passed through. Encoding escapes everything outside
the RFC 3986 unreserved set, with a few component-specific exceptions.
"""

import re
from urllib.parse import quote, unquote_to_bytes

from .exceptions import PackageURLError

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def decode(text: str, field: str) -> str:
    """Percent-decodes one component.

    Args:
        text: The raw, still encoded component text.
        field: Component name used in the error reason (e.g. "version").

    Returns:
        The decoded text. ``+`` is kept literally.

    Raises:
        PackageURLError: If an escape is malformed or the bytes are not UTF-8.
    """
    if "%" not in text:
        return text
    if _BAD_ESCAPE.search(text):
        raise PackageURLError(f"invalid percent-encoding in {field}")
    try:
        return unquote_to_bytes(text).decode("utf-8")
    except UnicodeDecodeError as e:
        raise PackageURLError(f"invalid UTF-8 sequence in {field}") from e


def encode_segment(text: str) -> str:
    """Encodes a type, namespace segment, qualifier key or subpath segment."""
    return quote(text, safe="")


def encode_name(text: str) -> str:
    """Encodes a name or version, leaving ``:`` readable."""
    return quote(text, safe=":")


def encode_qualifier_value(text: str) -> str:
    """Encodes a qualifier value, leaving ``:`` and ``/`` readable."""
    return quote(text, safe=":/")
