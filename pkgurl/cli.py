"""
Command-line front end for pkgurl.

Prints the canonical form of each purl given as an argument, or of each line
read from stdin when no argument is given.

Usage:
    python -m pkgurl "pkg:npm/Left-Pad@1.0.0"
    python -m pkgurl --json "pkg:maven/org.apache/commons-io@2.6?type=jar"
    cat purls.txt | pkgurl
"""
import argparse
import json
import logging
import sys
from typing import Any, Dict, Iterable, List, Optional

from .config import PKGURL_CONFIG
from .exceptions import ParsingException
from .purl import PackageURL, parse

logger = logging.getLogger(__name__)


def components_dict(purl: PackageURL) -> Dict[str, Any]:
    """Decoded components in the layout used by the purl-spec test suite."""
    return {
        "type": purl.type,
        "namespace": "/".join(purl.namespace) or None,
        "name": purl.name,
        "version": purl.version or None,
        "qualifiers": dict(purl.qualifiers) or None,
        "subpath": purl.subpath or None,
        "canonical_purl": purl.to_string(),
    }


def _inputs(purls: List[str]) -> Iterable[str]:
    if purls:
        yield from purls
        return
    for line in sys.stdin:
        line = line.strip()
        if line:
            yield line


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parses each input purl and prints its canonical form.

    Returns:
        0 if every input parsed, 1 otherwise.
    """
    parser = argparse.ArgumentParser(prog="pkgurl", description="Parse and canonicalize Package URLs (purls).")
    parser.add_argument("purls", nargs="*", help="Package URLs to parse. Read from stdin, one per line, if omitted.")
    parser.add_argument("--json", action="store_true", help="Print the decoded components as JSON.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=PKGURL_CONFIG["logging_level_int"], format="%(asctime)s-%(levelname)s-%(message)s")

    failures = 0
    for text in _inputs(args.purls):
        try:
            purl = parse(text)
        except ParsingException as e:
            logger.error(str(e))
            failures += 1
            continue
        if args.json:
            print(json.dumps(components_dict(purl)))
        else:
            print(purl)

    return 1 if failures else 0
