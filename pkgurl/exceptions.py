"""Errors raised while parsing or building package URLs."""


class PackageURLError(ValueError):
    """Base error for every purl failure.

    Raised as-is by the internal codec, scanner and type rules, and re-raised
    as one of the two public subclasses at the `parse` and `Builder.build`
    boundaries.

    Attributes:
        reason: Human readable description of what was wrong.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class BuildException(PackageURLError):
    """Raised by `Builder.build` when the supplied components are invalid."""


class ParsingException(PackageURLError):
    """Raised by `parse` when a string is not a valid purl.

    Attributes:
        input: The raw string that failed to parse.
        reason: Human readable description of what was wrong.
    """

    def __init__(self, input: str, reason: str):
        super().__init__(reason)
        self.input = input

    def __str__(self) -> str:
        return f"Parsing error: {self.reason} in {self.input!r}"
