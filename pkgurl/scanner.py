"""Positional scanner that splits a purl string into its seven components.

The scanner walks the input once, left to right, and only knows about the
delimiters ``:`` ``/`` ``@`` ``?`` ``#`` and ``&``. It decodes each component
it finds but performs no ecosystem validation; that is left to
`pkgurl.types`.
"""

from typing import List, NamedTuple, Tuple

from .codec import decode
from .exceptions import PackageURLError

_BLOB_END = "?#@"
_VERSION_END = "?#"
_DOT_SEGMENTS = ("", ".", "..")


class Components(NamedTuple):
    """Decoded components of a purl, before type normalization."""
    scheme: str
    type: str
    namespace: List[str]
    name: str
    version: str
    qualifiers: List[Tuple[str, str]]
    subpath: str


def _find_any(text: str, chars: str, start: int) -> int:
    """Index of the first of `chars` at or after `start`, or len(text)."""
    for i in range(start, len(text)):
        if text[i] in chars:
            return i
    return len(text)


def split_qualifiers(raw: str) -> List[Tuple[str, str]]:
    """Splits a raw ``k=v&k2=v2`` blob into decoded pairs.

    Keys are lowercased. A piece without ``=`` gets an empty value, empty
    pieces are skipped, and duplicate keys are kept in input order.
    """
    pairs = []
    for piece in raw.split("&"):
        if not piece:
            continue
        key, _, value = piece.partition("=")
        pairs.append((decode(key, "qualifier key").lower(), decode(value, "qualifier value")))
    return pairs


def split_subpath(raw: str) -> str:
    """Drops empty, ``.`` and ``..`` segments and decodes the remaining ones."""
    segments = [decode(s, "subpath") for s in raw.strip("/").split("/") if s not in _DOT_SEGMENTS]
    return "/".join(segments)


def scan(text: str) -> Components:
    """Splits `text` into decoded components.

    Args:
        text: A purl such as ``pkg:maven/org.apache/commons-io@2.6?type=jar``.
            The ``pkg://type/...`` form is accepted as well.

    Returns:
        The decoded `Components`, with scheme and type lowercased.

    Raises:
        PackageURLError: If a mandatory component is missing or a component
            is not validly percent-encoded.
    """
    end = len(text)

    colon = text.find(":")
    if colon <= 0:
        raise PackageURLError("parsing schema failed")
    scheme = text[:colon].lower()

    pos = colon + 1
    while pos < end and text[pos] == "/":
        pos += 1

    type_end = text.find("/", pos)
    if type_end == -1:
        if pos == end:
            raise PackageURLError("type is required")
        raise PackageURLError("name is required")
    if type_end == pos:
        raise PackageURLError("type is required")
    type_ = decode(text[pos:type_end], "type").lower()

    blob_start = type_end + 1
    blob_end = _find_any(text, _BLOB_END, blob_start)
    blob = text[blob_start:blob_end]
    if not blob:
        raise PackageURLError("name is required")

    name_start = blob.rfind("/") + 1
    raw_name = blob[name_start:]
    if not raw_name:
        raise PackageURLError("name is required")
    name = decode(raw_name, "name")
    namespace = [decode(s, "namespace") for s in blob[:name_start].rstrip("/").split("/") if s]

    pos = blob_end
    version = ""
    if pos < end and text[pos] == "@":
        version_end = _find_any(text, _VERSION_END, pos + 1)
        version = decode(text[pos + 1:version_end], "version")
        pos = version_end

    qualifiers = []
    if pos < end and text[pos] == "?":
        qualifiers_end = text.find("#", pos + 1)
        if qualifiers_end == -1:
            qualifiers_end = end
        qualifiers = split_qualifiers(text[pos + 1:qualifiers_end])
        pos = qualifiers_end

    subpath = ""
    if pos < end and text[pos] == "#":
        subpath = split_subpath(text[pos + 1:])

    return Components(scheme, type_, namespace, name, version, qualifiers, subpath)
