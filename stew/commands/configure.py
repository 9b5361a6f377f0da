"""The config command: change the stew configuration interactively."""

from __future__ import annotations

import os

from ..config import (
    StewConfig,
    current_os,
    get_stew_config_file_path,
    new_stew_config,
    new_system_info,
    prompt_config,
    read_stew_config_json,
    validate_stew_bin_path,
    write_stew_config_json,
)
from ..constants import green_color
from ..stewfile import path_exists, read_stew_lock_file_contents


def configure() -> None:
    """Set up the config, or edit an existing one and write it back."""
    user_os = current_os()
    config_file_path = get_stew_config_file_path(user_os)

    if not path_exists(config_file_path):
        new_stew_config(user_os)
        return

    stew_config = read_stew_config_json(config_file_path)
    system_info = new_system_info(stew_config)
    installed_packages = read_stew_lock_file_contents(system_info.stew_lock_file_path)

    new_stew_path, new_stew_bin_path, excluded = prompt_config(
        stew_config.stew_path,
        stew_config.stew_bin_path,
        installed_packages,
        stew_config.excluded_from_upgrade_all,
    )

    write_stew_config_json(
        StewConfig(
            stew_path=new_stew_path,
            stew_bin_path=new_stew_bin_path,
            excluded_from_upgrade_all=excluded,
        ),
        config_file_path,
    )
    print(f"📄 Updated {green_color(config_file_path)}")

    validate_stew_bin_path(new_stew_bin_path, os.environ.get("PATH", ""))