"""Plain HTTP GET requests, with GitHub API headers where they apply."""

from __future__ import annotations

import os

import requests

from .errors import NonZeroStatusCodeError

_GITHUB_API_HOST = "api.github.com"


def _github_headers(url: str, accept: str) -> dict[str, str]:
    if _GITHUB_API_HOST not in url:
        return {}
    headers = {"Accept": accept}
    github_token = os.environ.get("GITHUB_TOKEN", "")
    if github_token:
        headers["Authorization"] = f"token {github_token}"
    return headers


def get_http_response_body(url: str) -> str:
    """Fetch url and return its body, raising NonZeroStatusCodeError unless the status is 200."""
    headers = _github_headers(url, "application/vnd.github.v3+json")
    response = requests.get(url, headers=headers)
    try:
        if response.status_code != 200:
            raise NonZeroStatusCodeError(response.status_code)
        return response.content.decode("utf-8", errors="replace")
    finally:
        response.close()