"""Exceptions raised by stew, each with a coloured, user-facing message."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar, Optional

from .constants import red_color


class StewError(Exception):
    """Base class of every error stew reports to the user.

    Subclasses become dataclasses automatically; their ``template`` is
    formatted with each field's value rendered in red.
    """

    template: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        dataclass(eq=False)(cls)

    def __post_init__(self) -> None:
        Exception.__init__(self, *(getattr(self, f.name) for f in fields(self)))

    def _describe(self) -> str:
        if self.template:
            values = {f.name: red_color(getattr(self, f.name)) for f in fields(self)}
            return self.template.format(**values)
        return str(self.args[0]) if self.args else "stew failed"

    def __str__(self) -> str:
        return f"{red_color('Error:')} {self._describe()}"


class NonZeroStatusCodeError(StewError):
    """An HTTP request returned a status other than 200."""

    status_code: int
    template = "Received non-zero status code from HTTP request: {status_code}"


class ReleasesNotFoundError(StewError):
    """A GitHub repository has no releases."""

    owner: str
    repo: str

    def _describe(self) -> str:
        url = f"https://github.com/{self.owner}/{self.repo}"
        return f"Could not find any releases for {red_color(url)}"


class AssetsNotFoundError(StewError):
    """A GitHub release has no assets."""

    tag: str
    template = "Could not find any assets for release {tag}"


class NoPackagesInLockfileError(StewError):
    """Removal was attempted from an empty package list."""

    template = "Cannot remove from an empty packages slice in the lockfile"


class IndexOutOfBoundsInLockfileError(StewError):
    """An index outside the lockfile package list was used."""

    template = "Index out of bounds in lockfile packages"


class ExitUserSelectionError(StewError):
    """The user left an interactive prompt."""

    err: Optional[BaseException] = None

    def _describe(self) -> str:
        if self.err is None:
            detail = ""
        else:
            detail = str(self.err) or type(self.err).__name__
        return f"Exited from user selection: {red_color(detail)}"


class StewpathNotFoundError(StewError):
    """The stew data directory does not exist."""

    stew_path: str
    template = "Could not find the stew path at {stew_path}"


class NonZeroStatusCodeDownloadError(StewError):
    """A file download returned a status other than 200."""

    status_code: int
    template = (
        "Received non-zero status code from HTTP request when attempting "
        "to download a file: {status_code}"
    )


class EmptyCLIInputError(StewError):
    """A command was given an empty argument."""

    template = "Input cannot be empty. Use the --help flag for more info"


class CLIFlagAndInputError(StewError):
    """The --all flag was combined with a positional argument."""

    template = "Cannot use the --all flag with a positional argument"


class AbortBinaryOverwriteError(StewError):
    """The user declined to overwrite an installed binary."""

    binary: str
    template = "Overwrite of {binary} aborted"


class BinaryNotInstalledError(StewError):
    """The named binary is not installed."""

    binary: str
    template = "The binary {binary} is not currently installed"


class NoBinariesInstalledError(StewError):
    """No binaries are installed at all."""

    template = "No binaries are currently installed"


class UnrecognizedInputError(StewError):
    """Input is neither a URL nor a GitHub repository."""

    template = "Input was not recognized as a URL or GitHub repo"


class InstalledFromURLError(StewError):
    """A GitHub-only action was requested for a binary installed from a URL."""

    binary: str
    template = "The {binary} binary was installed directly from a URL"


class AlreadyInstalledLatestTagError(StewError):
    """The latest release is already installed."""

    tag: str
    template = "The latest tag {tag} is already installed"


class NoGithubSearchResultsError(StewError):
    """A GitHub search returned no repositories."""

    search_query: str
    template = "No GitHub search results found for search query {search_query}"


class InvalidGithubSearchQueryError(StewError):
    """A GitHub search query contains characters that are not allowed."""

    search_query: str = ""
    template = "The search query {search_query} contains invalid characters"


class BinaryMismatchError(StewError):
    """A downloaded binary's hash differs from the one in the lockfile."""

    binary_name: str
    template = (
        "The hash for the downloaded binary {binary_name} "
        "does not match the hash in the lockfile"
    )


class SelfInstallError(StewError):
    """Stew was asked to install or upgrade itself."""

    template = (
        "Stew cannot self-install/self-upgrade. You should upgrade stew with the "
        "original install method, whether it was manually or through a package manager"
    )