"""Per-ecosystem normalization and validation rules.

Each package type maps to one rule function in `_RULES`. A rule receives the
decoded components and returns the (possibly case-folded) namespace, name and
version, or raises `PackageURLError`. Types without an entry get no
normalization at all.

The rules follow the type definitions published at
https://github.com/package-url/purl-spec/tree/main/types.
"""

import re
from typing import Callable, Dict, FrozenSet, List, NoReturn, Sequence, Tuple

from .exceptions import PackageURLError

Qualifiers = Sequence[Tuple[str, str]]
Normalized = Tuple[List[str], str, str]
Rule = Callable[[str, List[str], str, str, Qualifiers], Normalized]

_TYPE_PATTERN = re.compile(r"[a-zA-Z0-9.+-]+")
_PUB_NAME_PATTERN = re.compile(r"[a-z0-9_]+")


def _fail(type_: str, message: str) -> NoReturn:
    raise PackageURLError(f"{type_}: {message}")


def _qualifier(qualifiers: Qualifiers, key: str) -> str:
    """Value of the first qualifier named `key`, or an empty string."""
    return next((v for k, v in qualifiers if k == key), "")


def _has_qualifier(qualifiers: Qualifiers, key: str) -> bool:
    return any(k == key for k, _ in qualifiers)


def _no_rule(type_: str, namespace: List[str], name: str, version: str, qualifiers: Qualifiers) -> Normalized:
    return namespace, name, version


def _vendor_rule(hint: str, lowercase_name: bool = True) -> Rule:
    """Rule for types whose namespace is a required, case-insensitive vendor."""
    def rule(type_, namespace, name, version, qualifiers):
        if not namespace:
            _fail(type_, f"namespace is required ({hint})")
        namespace = [segment.lower() for segment in namespace]
        if lowercase_name:
            name = name.lower()
        return namespace, name, version
    return rule


def _lowercase_rule(namespace: bool = False, name: bool = False, version: bool = False) -> Rule:
    """Rule that only case-folds the selected components."""
    fold_namespace, fold_name, fold_version = namespace, name, version

    def rule(type_, namespace, name, version, qualifiers):
        if fold_namespace:
            namespace = [segment.lower() for segment in namespace]
        if fold_name:
            name = name.lower()
        if fold_version:
            version = version.lower()
        return namespace, name, version
    return rule


def _cocoapods(type_, namespace, name, version, qualifiers):
    if " " in name or "+" in name or name.startswith("."):
        _fail(type_, "name cannot contain whitespace, a plus (+) character, or begin with a period (.)")
    return namespace, name, version


def _conan(type_, namespace, name, version, qualifiers):
    has_channel = _has_qualifier(qualifiers, "channel")
    if namespace and not has_channel:
        _fail(type_, "when namespace is present, channel qualifier is required")
    if not namespace and has_channel:
        _fail(type_, "when channel qualifier is present, namespace is required")
    return namespace, name, version


def _cpan(type_, namespace, name, version, qualifiers):
    if namespace:
        # Namespace is the CPAN author id.
        namespace = [segment.upper() for segment in namespace]
        if "::" in name:
            _fail(type_, "distribution name must not contain '::'")
    elif "-" in name:
        _fail(type_, "module name must not contain '-'")
    return namespace, name, version


def _cran(type_, namespace, name, version, qualifiers):
    if not version:
        _fail(type_, "version is required")
    return namespace, name, version


def _generic(type_, namespace, name, version, qualifiers):
    if not name:
        _fail(type_, "name is required")
    return namespace, name, version


def _maven(type_, namespace, name, version, qualifiers):
    if not namespace:
        _fail(type_, "namespace is required (group id)")
    return namespace, name, version


def _mlflow(type_, namespace, name, version, qualifiers):
    # Azure Databricks names are case-insensitive, Azure ML names are not.
    if "azuredatabricks.net" in _qualifier(qualifiers, "repository_url"):
        name = name.lower()
    return namespace, name, version


def _oci(type_, namespace, name, version, qualifiers):
    if not version:
        _fail(type_, "version is required (sha256:hex_encoded_lowercase_digest)")
    return namespace, name.lower(), version


def _pub(type_, namespace, name, version, qualifiers):
    name = name.lower()
    if not _PUB_NAME_PATTERN.fullmatch(name):
        _fail(type_, "name must only contain [a-z0-9_] characters")
    return namespace, name, version


def _pypi(type_, namespace, name, version, qualifiers):
    # PyPI treats "-" and "_" as the same character.
    return namespace, name.lower().replace("_", "-"), version


def _swid(type_, namespace, name, version, qualifiers):
    if not any(key == "tag_id" and value for key, value in qualifiers):
        _fail(type_, "tag_id qualifier must not be empty")
    return namespace, name, version


def _swift(type_, namespace, name, version, qualifiers):
    if not namespace:
        _fail(type_, "namespace is required (source host and user/organization)")
    if not version:
        _fail(type_, "version is required")
    if not name:
        _fail(type_, "name is required")
    return namespace, name, version


_RULES: Dict[str, Rule] = {
    "alpm": _vendor_rule("vendor such as arch, arch32, archarm, manjaro or msys"),
    "apk": _vendor_rule("vendor such as alpine or openwrt"),
    "bitbucket": _vendor_rule("user or organization"),
    "bitnami": _lowercase_rule(name=True),
    "cargo": _no_rule,
    "cocoapods": _cocoapods,
    "composer": _vendor_rule("vendor"),
    "conan": _conan,
    "conda": _no_rule,
    "cpan": _cpan,
    "cran": _cran,
    "deb": _vendor_rule("vendor such as debian or ubuntu"),
    "docker": _no_rule,
    "gem": _no_rule,
    "generic": _generic,
    "github": _vendor_rule("user or organization"),
    "golang": _lowercase_rule(namespace=True, name=True),
    "hackage": _no_rule,
    "hex": _lowercase_rule(namespace=True, name=True),
    "huggingface": _lowercase_rule(version=True),
    "luarocks": _lowercase_rule(namespace=True, name=True, version=True),
    "maven": _maven,
    "mlflow": _mlflow,
    "npm": _lowercase_rule(name=True),
    "nuget": _no_rule,
    "oci": _oci,
    "pub": _pub,
    "pypi": _pypi,
    "rpm": _vendor_rule("vendor such as fedora or opensuse", lowercase_name=False),
    "swid": _swid,
    "swift": _swift,
}

KNOWN_TYPES: FrozenSet[str] = frozenset(_RULES)


def is_known_type(type_: str) -> bool:
    """Returns True if `type_` has registered normalization rules."""
    return type_.lower() in KNOWN_TYPES


def _check_generic(type_: str, qualifiers: Qualifiers) -> None:
    if not type_:
        raise PackageURLError("type is required")
    if type_[0].isdigit():
        raise PackageURLError("type cannot start with a number")
    if not _TYPE_PATTERN.fullmatch(type_):
        raise PackageURLError("type contains invalid characters, only [a-zA-Z0-9.+-] are allowed")
    for key, _ in qualifiers:
        if not key:
            raise PackageURLError("qualifier key cannot be empty")
        if " " in key:
            raise PackageURLError(f"qualifier key cannot contain spaces: {key}")


def normalize(type_: str, namespace: Sequence[str], name: str, version: str,
              qualifiers: Qualifiers) -> Normalized:
    """Validates the components and applies the type's case rules.

    Args:
        type_: The package type, e.g. "maven".
        namespace: Decoded namespace segments.
        name: Decoded package name.
        version: Decoded version, empty when absent.
        qualifiers: Decoded (key, value) pairs.

    Returns:
        A ``(namespace, name, version)`` tuple after normalization.

    Raises:
        PackageURLError: If a generic or type-specific rule is violated.
    """
    _check_generic(type_, qualifiers)
    rule = _RULES.get(type_.lower(), _no_rule)
    namespace, name, version = rule(type_, list(namespace), name, version, qualifiers)
    if not name:
        raise PackageURLError("name is required")
    return namespace, name, version
