"""The uninstall command: remove installed binaries and their assets."""

from __future__ import annotations

from typing import Optional

from ..config import initialize
from ..constants import green_color
from ..errors import BinaryNotInstalledError, CLIFlagAndInputError, NoBinariesInstalledError
from ..parsing import validate_cli_input
from ..stewfile import (
    delete_asset_and_binary,
    new_lock_file,
    remove_package,
    write_lock_file_json,
)


def uninstall(uninstall_all_flag: bool, binary_name: Optional[str]) -> None:
    """Uninstall one binary, or all of them with the --all flag."""
    binary_name = binary_name or ""
    user_os, user_arch, _, system_info = initialize()

    if uninstall_all_flag and binary_name:
        raise CLIFlagAndInputError()
    if not uninstall_all_flag:
        validate_cli_input(binary_name)

    pkg_path = system_info.stew_pkg_path
    bin_path = system_info.stew_bin_path
    lock_file = new_lock_file(system_info.stew_lock_file_path, user_os, user_arch)

    if not lock_file.packages:
        raise NoBinariesInstalledError()

    if uninstall_all_flag:
        for pkg in lock_file.packages:
            delete_asset_and_binary(pkg_path, bin_path, pkg.asset, pkg.binary)
        lock_file.packages = []
    else:
        index = lock_file.find_binary(binary_name)
        if index is None:
            raise BinaryNotInstalledError(binary_name)
        pkg = lock_file.packages[index]
        delete_asset_and_binary(pkg_path, bin_path, pkg.asset, pkg.binary)
        lock_file.packages = remove_package(lock_file.packages, index)

    write_lock_file_json(lock_file, system_info.stew_lock_file_path)
    if uninstall_all_flag:
        print(f"✨ Successfully uninstalled all binaries from {green_color(bin_path)}")
    else:
        print(
            f"✨ Successfully uninstalled the {green_color(binary_name)} binary "
            f"from {green_color(bin_path)}"
        )