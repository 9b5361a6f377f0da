"""GitHub releases and repository search."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .constants import (
    REGEX_386,
    REGEX_AMD64,
    REGEX_ARM64,
    REGEX_CHECKSUM,
    REGEX_DARWIN,
    REGEX_GITHUB_SEARCH,
    REGEX_WINDOWS,
    STEW_OWNER,
    STEW_REPO,
)
from .errors import (
    AssetsNotFoundError,
    InvalidGithubSearchQueryError,
    ReleasesNotFoundError,
    SelfInstallError,
)
from .http import get_http_response_body
from .ui import warning_prompt_select

_OS_PATTERNS = {"darwin": REGEX_DARWIN, "windows": REGEX_WINDOWS}
_ARCH_PATTERNS = {"arm64": REGEX_ARM64, "amd64": REGEX_AMD64, "386": REGEX_386}
_CHECKSUM_RE = re.compile(REGEX_CHECKSUM)
_SEARCH_RE = re.compile(REGEX_GITHUB_SEARCH, re.ASCII)


@dataclass
class GithubAsset:
    """A downloadable file attached to a release."""

    name: str = ""
    download_url: str = ""
    size: int = 0
    content_type: str = ""


@dataclass
class GithubRelease:
    """A release and its assets."""

    tag_name: str = ""
    assets: list[GithubAsset] = field(default_factory=list)
    prerelease: bool = False


@dataclass
class GithubProject:
    """A repository together with its releases, newest first."""

    owner: str = ""
    repo: str = ""
    releases: list[GithubRelease] = field(default_factory=list)


@dataclass
class GithubSearchResult:
    """One repository found by a search."""

    full_name: str = ""
    stars: int = 0
    language: str = ""
    description: str = ""


@dataclass
class GithubSearch:
    """The results of a repository search."""

    search_query: str = ""
    count: int = 0
    items: list[GithubSearchResult] = field(default_factory=list)


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object for {what}")
    return data


def _list(data: Any, what: str) -> list[Any]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"expected a list for {what}")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string for {key!r}")
    return value


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer for {key!r}")
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean for {key!r}")
    return value


def _asset_from_json(data: Any) -> GithubAsset:
    obj = _mapping(data, "asset")
    return GithubAsset(
        name=_str(obj, "name"),
        download_url=_str(obj, "url"),
        size=_int(obj, "size"),
        content_type=_str(obj, "content_type"),
    )


def _release_from_json(data: Any) -> GithubRelease:
    obj = _mapping(data, "release")
    return GithubRelease(
        tag_name=_str(obj, "tag_name"),
        assets=[_asset_from_json(item) for item in _list(obj.get("assets"), "assets")],
        prerelease=_bool(obj, "prerelease"),
    )


def _search_result_from_json(data: Any) -> GithubSearchResult:
    obj = _mapping(data, "search result")
    return GithubSearchResult(
        full_name=_str(obj, "full_name"),
        stars=_int(obj, "stargazers_count"),
        language=_str(obj, "language"),
        description=_str(obj, "description"),
    )


def read_github_json(json_string: str) -> list[GithubRelease]:
    """Parse the body of the releases API."""
    data = json.loads(json_string)
    return [_release_from_json(item) for item in _list(data, "releases")]


def get_github_json(owner: str, repo: str) -> str:
    """Fetch up to 100 releases of owner/repo as raw JSON."""
    url = f"https://api.github.com/repos/{owner}/{repo}/releases?per_page=100"
    return get_http_response_body(url)


def new_github_project(owner: str, repo: str) -> GithubProject:
    """Fetch owner/repo and its releases; stew refuses to manage itself."""
    if owner == STEW_OWNER and repo == STEW_REPO:
        raise SelfInstallError()
    releases = read_github_json(get_github_json(owner, repo))
    return GithubProject(owner=owner, repo=repo, releases=releases)


def get_github_releases_tags(gh_project: GithubProject) -> list[str]:
    """Return the release tags of a project, raising if it has none."""
    tags = [release.tag_name for release in gh_project.releases]
    releases_found(tags, gh_project.owner, gh_project.repo)
    return tags


def releases_found(release_tags: Iterable[str], owner: str, repo: str) -> None:
    """Raise ReleasesNotFoundError if release_tags is empty."""
    if not list(release_tags):
        raise ReleasesNotFoundError(owner, repo)


def get_github_releases_assets(gh_project: GithubProject, tag: str) -> list[str]:
    """Return the asset names of the release with tag, raising if there are none."""
    assets = [
        asset.name
        for release in gh_project.releases
        if release.tag_name == tag
        for asset in release.assets
    ]
    assets_found(assets, tag)
    return assets


def assets_found(release_assets: Iterable[str], release_tag: str) -> None:
    """Raise AssetsNotFoundError if release_assets is empty."""
    if not list(release_assets):
        raise AssetsNotFoundError(release_tag)


def filter_release_assets(assets: Iterable[str]) -> list[str]:
    """Drop checksum files from a list of asset names."""
    return [asset for asset in assets if not _CHECKSUM_RE.search(asset)]


def detect_asset(user_os: str, user_arch: str, release_assets: Iterable[str]) -> str:
    """Pick the asset for this OS and arch, asking the user when it is not clear."""
    os_re = re.compile(_OS_PATTERNS.get(user_os, "(?i)" + user_os))
    arch_re = re.compile(_ARCH_PATTERNS.get(user_arch, "(?i)" + user_arch))

    filtered = filter_release_assets(release_assets)
    os_assets = [asset for asset in filtered if os_re.search(asset)]
    final_assets = [asset for asset in os_assets if arch_re.search(asset)]

    if len(final_assets) == 1:
        return final_assets[0]

    if user_os == "darwin" and user_arch == "arm64":
        fallback = darwin_arm_fallback(os_assets)
        if fallback is not None:
            return fallback

    return warning_prompt_select(
        "Could not automatically detect the release asset matching your OS/Arch. "
        "Please select it manually:",
        filtered,
    )


def darwin_arm_fallback(darwin_assets: Iterable[str]) -> Optional[str]:
    """Return the single amd64 macOS asset, which runs under Rosetta, or None."""
    amd64_re = re.compile(REGEX_AMD64)
    candidates = [asset for asset in darwin_assets if amd64_re.search(asset)]
    if len(candidates) != 1:
        return None
    return candidates[0]


def get_github_search_json(search_query: str) -> str:
    """Run a repository search and return the raw JSON."""
    if not search_query:
        raise InvalidGithubSearchQueryError()
    url = (
        f"https://api.github.com/search/repositories?q={search_query}"
        "+fork:true+archived:false"
    )
    return get_http_response_body(url)


def read_github_search_json(json_string: str) -> GithubSearch:
    """Parse the body of the search API."""
    obj = _mapping(json.loads(json_string), "search")
    return GithubSearch(
        count=_int(obj, "total_count"),
        items=[_search_result_from_json(item) for item in _list(obj.get("items"), "items")],
    )


def new_github_search(search_query: str) -> GithubSearch:
    """Search GitHub repositories for search_query."""
    search = read_github_search_json(get_github_search_json(search_query))
    search.search_query = search_query
    return search


def format_search_results(gh_search: GithubSearch) -> list[str]:
    """Render each search result as one line for a selection prompt."""
    return [
        f"{item.full_name} [⭐️{item.stars}] {item.description}" for item in gh_search.items
    ]


def validate_github_search_query(search_query: str) -> None:
    """Raise InvalidGithubSearchQueryError if search_query has disallowed characters."""
    if not _SEARCH_RE.search(search_query):
        raise InvalidGithubSearchQueryError(search_query)