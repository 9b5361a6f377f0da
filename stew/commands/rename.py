"""The rename command: give an installed binary a new name."""

from __future__ import annotations

import os
from typing import Optional

from ..config import initialize
from ..constants import green_color
from ..errors import BinaryNotInstalledError, NoBinariesInstalledError
from ..parsing import validate_cli_input
from ..stewfile import new_lock_file, write_lock_file_json
from ..ui import prompt_rename_binary


def rename(cli_input: Optional[str]) -> None:
    """Ask for a new name for an installed binary and rename it."""
    cli_input = cli_input or ""
    user_os, user_arch, _, system_info = initialize()
    validate_cli_input(cli_input)

    lock_file = new_lock_file(system_info.stew_lock_file_path, user_os, user_arch)
    if not lock_file.packages:
        raise NoBinariesInstalledError()

    index = lock_file.find_binary(cli_input)
    if index is None:
        raise BinaryNotInstalledError(cli_input)

    renamed = prompt_rename_binary(cli_input)
    os.rename(
        os.path.join(system_info.stew_bin_path, cli_input),
        os.path.join(system_info.stew_bin_path, renamed),
    )
    lock_file.packages[index].binary = renamed

    write_lock_file_json(lock_file, system_info.stew_lock_file_path)
    print(
        f"✨ Successfully renamed the {green_color(cli_input)} binary to {green_color(renamed)}"
    )