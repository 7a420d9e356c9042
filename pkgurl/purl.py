"""PURL model, builder and parser."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError, model_serializer, model_validator

from .codec import encode_name, encode_qualifier_value, encode_segment
from .config import PKGURL_CONFIG
from .exceptions import BuildException, PackageURLError, ParsingException
from .scanner import scan
from .types import normalize

logger = logging.getLogger(__name__)

DEFAULT_SCHEME = "pkg"
FIELDS = ("scheme", "type", "namespace", "name", "version", "qualifiers", "subpath")
_DOT_SEGMENTS = ("", ".", "..")


def _clean_subpath(subpath: str) -> str:
    return "/".join(s for s in subpath.split("/") if s not in _DOT_SEGMENTS)


def _render_qualifier(key: str, value: str) -> str:
    if not value:
        return encode_segment(key)
    return f"{encode_segment(key)}={encode_qualifier_value(value)}"


class PackageURL(BaseModel):
    """Represents a Package URL (purl).

    A purl is a URI that represents a software package in a mostly
    unambiguous way.
    See: https://github.com/package-url/purl-spec

    Instances are immutable and should be created with `Builder` or `parse`,
    which apply the per-type normalization rules. All components are stored
    decoded; percent-encoding only happens in `to_string`.

    Attributes:
        scheme: The URL scheme, "pkg" for every canonical purl.
        type: The package "type" or package management system.
        namespace: Name prefix segments such as a Maven groupid or a Docker image owner.
        name: The name of the package.
        version: The version of the package, empty when absent.
        qualifiers: Extra qualifying (key, value) pairs such as an OS or architecture.
        subpath: Extra subpath within a package, relative to the package root.
    """
    model_config = ConfigDict(frozen=True)

    scheme: Literal["pkg"] = DEFAULT_SCHEME
    type: str
    namespace: Tuple[str, ...] = ()
    name: str
    version: str = ""
    qualifiers: Tuple[Tuple[str, str], ...] = ()
    subpath: str = ""

    _canonical: Optional[str] = PrivateAttr(default=None)

    @model_validator(mode='before')
    @classmethod
    def parse_purl_string(cls, data: Any) -> Any:
        """Allows a purl string wherever a PackageURL is validated."""
        if isinstance(data, str):
            purl = parse(data)
            return {field: getattr(purl, field) for field in FIELDS}
        return data

    @model_validator(mode='after')
    def check_normalized(self) -> PackageURL:
        """Rejects components that break a type rule or are not in normalized form.

        Direct construction does not case-fold anything; use `Builder` to get
        normalized components.
        """
        namespace, name, version = normalize(self.type, self.namespace, self.name,
                                             self.version, self.qualifiers)
        normalized = (self.type.lower(), tuple(namespace), name, version, _clean_subpath(self.subpath))
        if "" in self.namespace or normalized != (self.type, self.namespace, self.name, self.version, self.subpath):
            raise PackageURLError(f"{self.type}: components are not normalized, use Builder to build them")
        return self

    @model_serializer
    def serialize_as_string(self) -> str:
        """Serializes to the canonical string, e.g. for model_dump_json()."""
        return self.to_string()

    @classmethod
    def from_string(cls, text: str) -> PackageURL:
        """Parses `text` into a PackageURL. See `parse`."""
        return parse(text)

    def to_builder(self) -> Builder:
        """Returns a Builder pre-populated with this purl's components."""
        return Builder.from_purl(self)

    def to_string(self) -> str:
        """Returns the canonical string form of this purl.

        The string is computed on first use and cached on the instance.

        Returns:
            The canonical purl, e.g. ``pkg:npm/%40angular/core@16.0.0``.
        """
        canonical = self._canonical
        if canonical is None:
            canonical = self._render()
            self._canonical = canonical
        return canonical

    def _render(self) -> str:
        parts = [DEFAULT_SCHEME, ":", encode_segment(self.type), "/"]
        for segment in self.namespace:
            parts.append(encode_segment(segment))
            parts.append("/")
        parts.append(encode_name(self.name))
        if self.version:
            parts.append("@")
            parts.append(encode_name(self.version))
        if self.qualifiers:
            ordered = sorted(self.qualifiers, key=lambda pair: pair[0])
            parts.append("?")
            parts.append("&".join(_render_qualifier(k, v) for k, v in ordered))
        subpath = "/".join(encode_segment(s) for s in self.subpath.split("/") if s not in _DOT_SEGMENTS)
        if subpath:
            parts.append("#")
            parts.append(subpath)
        return "".join(parts)

    def _key(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, field) for field in FIELDS)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PackageURL):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.to_string()


class Builder:
    """Accumulates purl components and validates them in `build`.

    Setters return the builder so calls can be chained; the last call for a
    component wins. Nothing is validated until `build` is called.

    Example:
        purl = (Builder().type("maven").namespace(["org.apache.commons"])
                .name("commons-lang3").version("3.12.0").build())
    """

    def __init__(self):
        self._scheme = DEFAULT_SCHEME
        self._type = ""
        self._namespace: List[str] = []
        self._name = ""
        self._version = ""
        self._qualifiers: List[Tuple[str, str]] = []
        self._subpath = ""

    @classmethod
    def from_purl(cls, purl: PackageURL) -> Builder:
        """Creates a builder holding the components of an existing purl."""
        return (cls().scheme(purl.scheme)
                .type(purl.type)
                .namespace(purl.namespace)
                .name(purl.name)
                .version(purl.version)
                .qualifiers(purl.qualifiers)
                .subpath(purl.subpath))

    def scheme(self, scheme: str) -> Builder:
        """Sets the input scheme. It is lowercased.

        The built purl always uses "pkg". Any other scheme is accepted unless
        `strict_scheme` is configured, in which case `build` rejects it.
        """
        self._scheme = scheme.lower()
        return self

    def type(self, type_: str) -> Builder:
        """Sets the package type (e.g. maven, npm, nuget). It is lowercased."""
        self._type = type_.lower()
        return self

    def namespace(self, namespace: Union[str, Iterable[str], None]) -> Builder:
        """Sets the namespace.

        Args:
            namespace: Either a sequence of decoded segments or a single
                ``/``-joined string. Empty segments are dropped.
        """
        if namespace is None:
            namespace = []
        elif isinstance(namespace, str):
            namespace = namespace.split("/")
        self._namespace = [segment for segment in namespace if segment]
        return self

    def name(self, name: str) -> Builder:
        self._name = name
        return self

    def version(self, version: Optional[str]) -> Builder:
        self._version = version or ""
        return self

    def qualifiers(self, qualifiers: Union[Mapping[str, str], Iterable[Tuple[str, str]], None]) -> Builder:
        """Sets the qualifiers from a mapping or from (key, value) pairs.

        Duplicate keys in a pair sequence are kept. A value of None is
        treated as an empty value.
        """
        if qualifiers is None:
            qualifiers = []
        elif isinstance(qualifiers, Mapping):
            qualifiers = qualifiers.items()
        self._qualifiers = [(key, "" if value is None else value) for key, value in qualifiers]
        return self

    def subpath(self, subpath: Optional[str]) -> Builder:
        self._subpath = subpath or ""
        return self

    def build(self) -> PackageURL:
        """Builds a PackageURL from the configured components.

        Components are validated and case-normalized according to the
        package type's rules.

        Returns:
            A new, immutable PackageURL.

        Raises:
            BuildException: If a component violates a rule.
        """
        try:
            return self._build()
        except PackageURLError as e:
            logger.debug(f"Rejected purl components for type '{self._type}': {e.reason}")
            raise BuildException(e.reason) from e
        except ValidationError as e:
            reason = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
            logger.debug(f"Rejected purl components for type '{self._type}': {reason}")
            raise BuildException(f"invalid component value: {reason}") from e

    def _build(self) -> PackageURL:
        if PKGURL_CONFIG["strict_scheme"] and self._scheme != DEFAULT_SCHEME:
            raise PackageURLError(f"invalid scheme: {self._scheme}")
        namespace, name, version = normalize(self._type, self._namespace, self._name,
                                             self._version, self._qualifiers)
        return PackageURL(
            scheme=DEFAULT_SCHEME,
            type=self._type,
            namespace=tuple(namespace),
            name=name,
            version=version,
            qualifiers=tuple(self._qualifiers),
            subpath=_clean_subpath(self._subpath),
        )


def parse(text: str) -> PackageURL:
    """Parses a purl string.

    Both ``pkg:type/...`` and ``pkg://type/...`` are accepted. Components are
    decoded and normalized with the same rules `Builder.build` applies.

    Args:
        text: The purl string, e.g. ``pkg:pypi/Django_Rest@3.0?os=linux``.

    Returns:
        The parsed PackageURL.

    Raises:
        ParsingException: If the string is malformed or a type rule is violated.
    """
    try:
        components = scan(text)
        purl = (Builder().scheme(components.scheme)
                .type(components.type)
                .namespace(components.namespace)
                .name(components.name)
                .version(components.version)
                .qualifiers(components.qualifiers)
                .subpath(components.subpath)
                ._build())
    except PackageURLError as e:
        logger.debug(f"Failed to parse purl {text!r}: {e.reason}")
        raise ParsingException(text, e.reason) from e
    logger.debug(f"Parsed purl {text!r} as type '{purl.type}'")
    return purl
