"""Parsing of the package specifications accepted on the command line and in a Stewfile."""

from __future__ import annotations

import re
from typing import Optional, Sequence, TypeVar

from .constants import REGEX_GITHUB, REGEX_URL
from .errors import EmptyCLIInputError, UnrecognizedInputError
from .models import PackageData

T = TypeVar("T")

_GITHUB_RE = re.compile(REGEX_GITHUB, re.ASCII)
_URL_RE = re.compile(REGEX_URL, re.ASCII)


def _base_name(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def validate_cli_input(cli_input: str) -> None:
    """Raise EmptyCLIInputError if cli_input is empty."""
    if not cli_input:
        raise EmptyCLIInputError()


def parse_cli_input(cli_input: str) -> PackageData:
    """Parse "owner/repo[@tag]", a URL, or either prefixed with "binary:"."""
    validate_cli_input(cli_input)

    if _GITHUB_RE.search(cli_input):
        return parse_github_input(cli_input)
    if _URL_RE.search(cli_input):
        return parse_url_input(cli_input)

    binary, separator, rest = cli_input.partition(":")
    if separator:
        if _GITHUB_RE.search(rest):
            pkg = parse_github_input(rest)
            pkg.binary = binary
            return pkg
        if _URL_RE.search(rest):
            pkg = parse_url_input(rest)
            pkg.binary = binary
            return pkg
    raise UnrecognizedInputError()


def parse_github_input(cli_input: str) -> PackageData:
    """Parse "owner/repo" with an optional "@tag"."""
    trimmed = cli_input.strip().strip("/").strip("@")
    owner_and_repo, _, tag = trimmed.partition("@")
    owner, separator, repo = owner_and_repo.partition("/")
    if not separator:
        raise UnrecognizedInputError()
    return PackageData(source="github", owner=owner, repo=repo, tag=tag)


def parse_url_input(cli_input: str) -> PackageData:
    """Describe a package downloaded directly from a URL."""
    return PackageData(source="other", asset=_base_name(cli_input), url=cli_input)


def contains(items: Sequence[T], target: T) -> Optional[int]:
    """Return the index of the first item equal to target, or None."""
    return next((index for index, item in enumerate(items) if item == target), None)