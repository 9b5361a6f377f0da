"""The upgrade command: move installed binaries to their latest GitHub release."""

from __future__ import annotations

import sys
from typing import Optional

from ..config import StewConfig, SystemInfo, initialize
from ..constants import green_color, yellow_color
from ..errors import (
    AlreadyInstalledLatestTagError,
    BinaryNotInstalledError,
    CLIFlagAndInputError,
    InstalledFromURLError,
    NoBinariesInstalledError,
    ReleasesNotFoundError,
)
from ..github import (
    detect_asset,
    get_github_releases_assets,
    get_github_releases_tags,
    new_github_project,
)
from ..models import LockFile
from ..parsing import contains, validate_cli_input
from ..stewfile import new_lock_file, write_lock_file_json
from ..ui import Spinner
from .install import _download_and_install, _reset_dir


def upgrade(upgrade_all_flag: bool, binary_name: Optional[str]) -> None:
    """Upgrade one installed binary, or all of them with the --all flag."""
    binary_name = binary_name or ""
    user_os, user_arch, stew_config, system_info = initialize()

    if upgrade_all_flag and binary_name:
        raise CLIFlagAndInputError()
    if not upgrade_all_flag:
        validate_cli_input(binary_name)

    lock_file = new_lock_file(system_info.stew_lock_file_path, user_os, user_arch)
    _reset_dir(system_info.stew_tmp_path)

    if not lock_file.packages:
        raise NoBinariesInstalledError()

    if upgrade_all_flag:
        upgrade_all(user_os, user_arch, lock_file, system_info, stew_config)
    else:
        upgrade_one(binary_name, user_os, user_arch, lock_file, system_info)


def upgrade_one(
    binary_name: str,
    user_os: str,
    user_arch: str,
    lock_file: LockFile,
    system_info: SystemInfo,
) -> None:
    """Upgrade binary_name to the latest stable release and update lock_file."""
    index = lock_file.find_binary(binary_name)
    if index is None:
        raise BinaryNotInstalledError(binary_name)

    pkg = lock_file.packages[index]
    print(green_color(pkg.binary))
    if pkg.source == "other":
        raise InstalledFromURLError(pkg.binary)

    with Spinner():
        project = new_github_project(pkg.owner, pkg.repo)

    get_github_releases_tags(project)
    release = next((release for release in project.releases if not release.prerelease), None)
    if release is None:
        raise ReleasesNotFoundError(pkg.owner, pkg.repo)
    tag = release.tag_name

    if pkg.tag == tag:
        raise AlreadyInstalledLatestTagError(tag)

    release_assets = get_github_releases_assets(project, tag)
    asset = detect_asset(user_os, user_arch, release_assets)
    download_url = release.assets[contains(release_assets, asset)].download_url

    _, binary_hash = _download_and_install(
        asset, download_url, pkg.repo, system_info, lock_file, True, pkg.binary, ""
    )

    previous_tag = pkg.tag
    entry = lock_file.packages[index]
    entry.tag = tag
    entry.asset = asset
    entry.url = download_url
    entry.binary_hash = binary_hash
    write_lock_file_json(lock_file, system_info.stew_lock_file_path)

    print(
        f"✨ Successfully upgraded the {green_color(entry.binary)} binary "
        f"from {green_color(previous_tag)} to {green_color(tag)}"
    )


def upgrade_all(
    user_os: str,
    user_arch: str,
    lock_file: LockFile,
    system_info: SystemInfo,
    stew_config: StewConfig,
) -> None:
    """Upgrade every installed binary not excluded in the config, reporting failures."""
    for pkg in list(lock_file.packages):
        if pkg.binary in stew_config.excluded_from_upgrade_all:
            print(f"{yellow_color(pkg.binary)} (Excluded)")
            continue
        try:
            upgrade_one(pkg.binary, user_os, user_arch, lock_file, system_info)
        except Exception as err:  # report each failure and carry on with the rest
            print(err, file=sys.stderr)