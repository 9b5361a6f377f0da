"""The install command: install binaries from GitHub, a URL, a Stewfile or a lockfile."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path
from typing import Iterable, Optional

from ..config import SystemInfo, initialize
from ..constants import green_color, yellow_color
from ..errors import EmptyCLIInputError
from ..github import (
    GithubProject,
    detect_asset,
    get_github_releases_assets,
    get_github_releases_tags,
    new_github_project,
)
from ..installer import download_file, install_binary
from ..models import LockFile, PackageData
from ..parsing import contains, parse_cli_input
from ..stewfile import (
    new_lock_file,
    read_stew_lock_file_contents,
    read_stewfile_contents,
    write_lock_file_json,
)
from ..ui import Spinner, warning_prompt_select

LOCK_FILE_NAME = "Stewfile.lock.json"
STEWFILE_NAME = "Stewfile"


def _reset_dir(path: str) -> None:
    """Remove whatever is at path and create it again as an empty directory."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)
    os.makedirs(path, mode=0o755, exist_ok=True)


def _download_and_install(
    asset: str,
    download_url: str,
    repo: str,
    system_info: SystemInfo,
    lock_file: LockFile,
    overwrite_from_upgrade: bool,
    desired_binary_rename: str,
    expected_binary_hash: str,
) -> tuple[str, str]:
    """Download an asset into the pkg directory and install its binary.

    The downloaded asset is removed again if installing fails.
    """
    download_path = os.path.join(system_info.stew_pkg_path, asset)
    download_file(download_path, download_url)
    print(f"✅ Downloaded {green_color(asset)} to {green_color(system_info.stew_pkg_path)}")
    try:
        return install_binary(
            download_path,
            repo,
            system_info,
            lock_file,
            overwrite_from_upgrade,
            desired_binary_rename,
            expected_binary_hash,
        )
    except Exception:
        Path(download_path).unlink(missing_ok=True)
        raise


def _input_base_name(cli_input: str) -> str:
    if not cli_input:
        return ""
    return os.path.basename(os.path.normpath(cli_input))


def install(cli_input: Optional[str]) -> None:
    """Install from "owner/repo[@tag]", a URL, a Stewfile or a Stewfile.lock.json."""
    cli_input = cli_input or ""
    user_os, user_arch, _, system_info = initialize()

    base_name = _input_base_name(cli_input)
    if base_name in (LOCK_FILE_NAME, STEWFILE_NAME):
        from_lock_file = base_name == LOCK_FILE_NAME
        reader = read_stew_lock_file_contents if from_lock_file else read_stewfile_contents
        pkgs = reader(cli_input)
        if not pkgs:
            raise EmptyCLIInputError()
        if from_lock_file:
            _install_from_lock_file(pkgs, user_os, user_arch, system_info)
        else:
            _install_from_stewfile(pkgs, user_os, user_arch, system_info)
    else:
        install_one(parse_cli_input(cli_input), user_os, user_arch, system_info, False)


def _resolve_github_asset(
    project: GithubProject, tag: str, asset: str, user_os: str, user_arch: str
) -> tuple[str, str, str]:
    release_tags = get_github_releases_tags(project)

    if tag in ("", "latest"):
        tag = next(
            (release.tag_name for release in project.releases if not release.prerelease), tag
        )

    tag_index = contains(release_tags, tag)
    if tag_index is None:
        tag = warning_prompt_select(
            f"Could not find a release with the tag {yellow_color(tag)} - please select a release:",
            release_tags,
        )
        tag_index = contains(release_tags, tag)

    release_assets = get_github_releases_assets(project, tag)
    if not asset:
        asset = detect_asset(user_os, user_arch, release_assets)

    asset_index = contains(release_assets, asset)
    if asset_index is None:
        asset = warning_prompt_select(
            f"Could not find the asset {yellow_color(asset)} - please select an asset:",
            release_assets,
        )
        asset_index = contains(release_assets, asset)

    download_url = project.releases[tag_index].assets[asset_index].download_url
    return tag, asset, download_url


def install_one(
    pkg: PackageData,
    user_os: str,
    user_arch: str,
    system_info: SystemInfo,
    installing_from_lock_file: bool,
) -> None:
    """Download and install one package, then record it in the lockfile."""
    lock_file = new_lock_file(system_info.stew_lock_file_path, user_os, user_arch)
    _reset_dir(system_info.stew_tmp_path)

    tag, asset, download_url = pkg.tag, pkg.asset, pkg.url
    is_github = pkg.source == "github"

    if is_github:
        print(green_color(f"{pkg.owner}/{pkg.repo}"))
        with Spinner():
            project = new_github_project(pkg.owner, pkg.repo)
        tag, asset, download_url = _resolve_github_asset(project, tag, asset, user_os, user_arch)
    else:
        print(green_color(asset))

    binary_name, binary_hash = _download_and_install(
        asset,
        download_url,
        pkg.repo,
        system_info,
        lock_file,
        installing_from_lock_file,
        pkg.binary,
        pkg.binary_hash,
    )

    package_data = PackageData(
        source="github" if is_github else "other",
        owner=pkg.owner if is_github else "",
        repo=pkg.repo if is_github else "",
        tag=tag if is_github else "",
        asset=asset,
        binary=binary_name,
        url=download_url,
        binary_hash=binary_hash,
    )

    index = lock_file.find_binary(binary_name)
    if installing_from_lock_file and index is not None:
        lock_file.packages[index] = package_data
    else:
        lock_file.packages.append(package_data)

    write_lock_file_json(lock_file, system_info.stew_lock_file_path)
    print(
        f"✨ Successfully installed the {green_color(binary_name)} binary "
        f"in {green_color(system_info.stew_bin_path)}"
    )


def _install_from_lock_file(
    pkgs: Iterable[PackageData], user_os: str, user_arch: str, system_info: SystemInfo
) -> None:
    for pkg in pkgs:
        install_one(pkg, user_os, user_arch, system_info, True)


def _install_from_stewfile(
    pkgs: Iterable[PackageData], user_os: str, user_arch: str, system_info: SystemInfo
) -> None:
    for pkg in pkgs:
        try:
            install_one(pkg, user_os, user_arch, system_info, False)
        except Exception as err:  # report each failure and carry on with the rest
            print(err, file=sys.stderr)