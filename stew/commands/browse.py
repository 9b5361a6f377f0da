"""The browse command: pick a release and an asset of a GitHub repo and install it."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional

from ..config import initialize
from ..constants import green_color
from ..github import (
    get_github_releases_assets,
    get_github_releases_tags,
    new_github_project,
)
from ..installer import download_file, install_binary
from ..models import PackageData
from ..parsing import contains, parse_cli_input
from ..stewfile import new_lock_file, write_lock_file_json
from ..ui import Spinner, prompt_select


def _reset_dir(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)
    os.makedirs(path, mode=0o755, exist_ok=True)


def browse(cli_input: Optional[str]) -> None:
    """Let the user choose a release and asset of "owner/repo", then install it."""
    user_os, user_arch, _, system_info = initialize()

    parsed = parse_cli_input(cli_input or "")
    owner, repo = parsed.owner, parsed.repo

    lock_file = new_lock_file(system_info.stew_lock_file_path, user_os, user_arch)
    _reset_dir(system_info.stew_tmp_path)

    print(green_color(f"{owner}/{repo}"))
    with Spinner():
        project = new_github_project(owner, repo)

    release_tags = get_github_releases_tags(project)
    tag = prompt_select("Choose a release tag:", release_tags)
    tag_index = contains(release_tags, tag)

    release_assets = get_github_releases_assets(project, tag)
    asset = prompt_select("Download and install an asset", release_assets)
    asset_index = contains(release_assets, asset)

    download_url = project.releases[tag_index].assets[asset_index].download_url
    download_path = os.path.join(system_info.stew_pkg_path, asset)
    download_file(download_path, download_url)
    print(f"✅ Downloaded {green_color(asset)} to {green_color(system_info.stew_pkg_path)}")

    try:
        binary_name, binary_hash = install_binary(
            download_path, repo, system_info, lock_file, False, "", ""
        )
    except Exception:
        Path(download_path).unlink(missing_ok=True)
        raise

    lock_file.packages.append(
        PackageData(
            source="github",
            owner=project.owner,
            repo=project.repo,
            tag=tag,
            asset=asset,
            binary=binary_name,
            url=download_url,
            binary_hash=binary_hash,
        )
    )
    write_lock_file_json(lock_file, system_info.stew_lock_file_path)

    print(
        f"✨ Successfully installed the {green_color(binary_name)} binary "
        f"in {green_color(system_info.stew_bin_path)}"
    )