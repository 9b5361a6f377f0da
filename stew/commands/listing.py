"""The list command: show the installed binaries."""

from __future__ import annotations

import sys

from ..config import initialize
from ..constants import green_color, set_color_enabled
from ..stewfile import new_lock_file


def list_binaries(show_tags: bool) -> None:
    """Print each installed binary with its source, and optionally its tag."""
    if not sys.stdout.isatty():
        set_color_enabled(False)

    user_os, user_arch, _, system_info = initialize()
    lock_file = new_lock_file(system_info.stew_lock_file_path, user_os, user_arch)

    for pkg in lock_file.packages:
        if pkg.source == "other":
            print(green_color(pkg.binary + ":") + pkg.url)
        elif pkg.source == "github":
            line = green_color(pkg.binary + ":") + f"{pkg.owner}/{pkg.repo}"
            print(f"{line}@{pkg.tag}" if show_tags else line)