"""Tests for the PURL model."""
import pytest
from pydantic import BaseModel, ValidationError

from pkgurl import Builder, BuildException, PackageURL, parse
from pkgurl.config import PKGURL_CONFIG


def test_purl_to_string_simple() -> None:
    """Test that a simple PURL is printed correctly."""
    purl = Builder().type("npm").name("base64url").version("3.0.0").build()
    assert purl.to_string() == "pkg:npm/base64url@3.0.0"
    assert str(purl) == "pkg:npm/base64url@3.0.0"


def test_purl_to_string_with_namespace() -> None:
    """Test that a PURL with a namespace is printed correctly."""
    purl = (Builder().type("maven")
            .namespace("org.apache.logging.log4j")
            .name("log4j-core")
            .version("2.17.1")
            .build())
    assert purl.namespace == ("org.apache.logging.log4j",)
    assert purl.to_string() == "pkg:maven/org.apache.logging.log4j/log4j-core@2.17.1"


def test_purl_to_string_with_qualifiers() -> None:
    """Test that qualifiers are printed sorted by key."""
    purl = (Builder().type("docker")
            .namespace(["library"])
            .name("nginx")
            .version("latest")
            .qualifiers([("os", "linux"), ("arch", "amd64")])
            .build())
    assert purl.to_string() == "pkg:docker/library/nginx@latest?arch=amd64&os=linux"


def test_purl_to_string_with_subpath() -> None:
    """Test that a PURL with a subpath is printed correctly."""
    purl = (Builder().type("github")
            .namespace("package-url")
            .name("purl-spec")
            .version("a1b2c3d")
            .subpath("README.md")
            .build())
    assert purl.to_string() == "pkg:github/package-url/purl-spec@a1b2c3d#README.md"


def test_qualifier_ordering() -> None:
    purl = Builder().type("generic").name("x").qualifiers([("b", "2"), ("a", "1")]).build()
    assert purl.qualifiers == (("b", "2"), ("a", "1"))
    assert "?a=1&b=2" in purl.to_string()


def test_duplicate_qualifier_keys_are_kept() -> None:
    purl = Builder().type("generic").name("x").qualifiers([("b", "2"), ("a", "1"), ("b", "1")]).build()
    assert purl.to_string() == "pkg:generic/x?a=1&b=2&b=1"


def test_qualifier_with_empty_value_prints_bare_key() -> None:
    purl = Builder().type("generic").name("x").qualifiers({"flag": "", "k": "v"}).build()
    assert purl.to_string() == "pkg:generic/x?flag&k=v"


def test_subpath_traversal_is_stripped() -> None:
    purl = Builder().type("generic").name("x").subpath("../etc/./passwd").build()
    assert purl.subpath == "etc/passwd"
    assert purl.to_string() == "pkg:generic/x#etc/passwd"


def test_namespace_with_at_sign_round_trips() -> None:
    purl = Builder().type("generic").namespace(["user@host"]).name("tool").version("1.0").build()
    assert purl.to_string() == "pkg:generic/user%40host/tool@1.0"
    reparsed = parse(purl.to_string())
    assert reparsed.namespace == ("user@host",)
    assert reparsed.version == "1.0"
    assert reparsed == purl


def test_empty_namespace_segments_are_dropped() -> None:
    purl = Builder().type("generic").namespace("/a//b/").name("x").build()
    assert purl.namespace == ("a", "b")


def test_builder_last_write_wins() -> None:
    purl = Builder().type("npm").name("first").name("second").version("1").version(None).build()
    assert purl.name == "second"
    assert purl.version == ""


def test_builder_type_and_scheme_are_lowercased() -> None:
    purl = Builder().scheme("PKG").type("NPM").name("x").build()
    assert purl.scheme == "pkg"
    assert purl.type == "npm"


@pytest.mark.parametrize(
    "builder, reason",
    [
        (Builder().name("x"), "type is required"),
        (Builder().type("npm"), "name is required"),
        (Builder().type("9npm").name("x"), "type cannot start with a number"),
        (Builder().type("n/pm").name("x"), "type contains invalid characters"),
        (Builder().type("npm").name("x").qualifiers({"": "v"}), "qualifier key cannot be empty"),
    ],
)
def test_build_failures(builder, reason) -> None:
    with pytest.raises(BuildException, match=reason) as excinfo:
        builder.build()
    assert reason in excinfo.value.reason


def test_to_builder_rebuilds_equal_purl() -> None:
    purl = parse("pkg:maven/org.apache/commons-io@2.6?type=jar&classifier=sources#src/main")
    rebuilt = purl.to_builder().build()
    assert rebuilt == purl
    assert rebuilt.to_string() == purl.to_string()
    assert Builder.from_purl(purl).build() == purl


def test_equality_is_component_wise() -> None:
    a = parse("pkg:npm/foo@1.0")
    b = Builder().type("npm").name("FOO").version("1.0").build()
    c = parse("pkg:npm/foo@1.1")
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_equality_ignores_cached_string() -> None:
    a = parse("pkg:npm/foo@1.0")
    b = parse("pkg:npm/foo@1.0")
    a.to_string()
    assert a == b


def test_to_string_is_memoized() -> None:
    purl = parse("pkg:npm/foo@1.0")
    assert purl.to_string() is purl.to_string()


def test_purl_is_immutable() -> None:
    purl = parse("pkg:npm/foo@1.0")
    with pytest.raises(ValidationError):
        purl.name = "bar"


def test_model_validate_accepts_purl_string() -> None:
    purl = PackageURL.model_validate("pkg:npm/Foo@1.0")
    assert purl == parse("pkg:npm/foo@1.0")


def test_model_dump_is_canonical_string() -> None:
    purl = parse("pkg:npm/Foo@1.0")
    assert purl.model_dump() == "pkg:npm/foo@1.0"
    assert purl.model_dump_json() == '"pkg:npm/foo@1.0"'


class Component(BaseModel):
    name: str
    purl: PackageURL


def test_purl_as_field_of_another_model() -> None:
    component = Component(name="left-pad", purl="pkg:npm/Left-Pad@1.0.0")
    assert component.purl.name == "left-pad"
    assert component.model_dump() == {"name": "left-pad", "purl": "pkg:npm/left-pad@1.0.0"}


def test_invalid_purl_string_in_model_raises_validation_error() -> None:
    with pytest.raises(ValidationError, match="namespace is required"):
        Component(name="x", purl="pkg:maven/no-namespace@1.0")


def test_from_string() -> None:
    assert PackageURL.from_string("pkg:npm/foo") == parse("pkg:npm/foo")


def test_builder_output_always_uses_pkg_scheme() -> None:
    purl = Builder().scheme("http").type("npm").name("x").build()
    assert purl.scheme == "pkg"
    assert purl.to_string() == "pkg:npm/x"
    assert purl == Builder().type("npm").name("x").build()


def test_builder_strict_scheme_rejects_other_schemes(monkeypatch) -> None:
    monkeypatch.setitem(PKGURL_CONFIG, "strict_scheme", True)
    with pytest.raises(BuildException, match="invalid scheme: http"):
        Builder().scheme("http").type("npm").name("x").build()


def test_constructor_accepts_normalized_components() -> None:
    purl = PackageURL(type="npm", name="foo", version="1.0.0")
    assert purl == parse("pkg:npm/foo@1.0.0")
    assert purl.to_string() == "pkg:npm/foo@1.0.0"


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"type": "maven", "name": "x"}, "maven: namespace is required"),
        ({"type": "maven", "name": "Foo"}, "maven: namespace is required"),
        ({"type": "9 bad", "name": ""}, "type cannot start with a number"),
        ({"type": "npm", "name": ""}, "name is required"),
        ({"type": "npm", "name": "Foo"}, "not normalized"),
        ({"type": "NPM", "name": "foo"}, "not normalized"),
        ({"type": "npm", "namespace": ("", "scope"), "name": "foo"}, "not normalized"),
        ({"type": "npm", "name": "foo", "subpath": "../etc"}, "not normalized"),
        ({"type": "npm", "name": "foo", "scheme": "http"}, "scheme"),
    ],
)
def test_constructor_rejects_invalid_components(fields, message) -> None:
    with pytest.raises(ValidationError, match=message):
        PackageURL(**fields)
    with pytest.raises(ValidationError, match=message):
        PackageURL.model_validate(fields)


def test_builder_treats_none_qualifier_value_as_empty() -> None:
    purl = Builder().type("npm").name("x").qualifiers({"k": None}).build()
    assert purl.qualifiers == (("k", ""),)
    assert purl.to_string() == "pkg:npm/x?k"


def test_builder_wraps_bad_component_values() -> None:
    with pytest.raises(BuildException, match="invalid component value") as excinfo:
        Builder().type("npm").name("x").qualifiers({"k": 5}).build()
    assert isinstance(excinfo.value.__cause__, ValidationError)
