"""The search command: find a GitHub repository and install from it."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote_plus

from ..errors import EmptyCLIInputError, NoGithubSearchResultsError
from ..github import format_search_results, new_github_search, validate_github_search_query
from ..parsing import contains
from ..ui import Spinner, prompt_select
from .install import install


def search(cli_input: Sequence[str]) -> None:
    """Search GitHub for the given terms, let the user pick a repo, and install it."""
    terms = list(cli_input or [])
    if not terms:
        raise EmptyCLIInputError()
    for term in terms:
        validate_github_search_query(term)

    search_query = quote_plus(" ".join(terms), safe="")

    with Spinner():
        github_search = new_github_search(search_query)

    if not github_search.items:
        raise NoGithubSearchResultsError(github_search.search_query)

    formatted = format_search_results(github_search)
    choice = prompt_select("Choose a GitHub project:", formatted)
    index = contains(formatted, choice)

    install(github_search.items[index].full_name)