"""Stew configuration: where its data and binaries live, and the interactive setup."""

from __future__ import annotations

import json
import os
import platform
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Union

from .constants import green_color, yellow_color
from .models import PackageData
from .stewfile import path_exists
from .ui import prompt_input, prompt_multi_select

PathLike = Union[str, "os.PathLike[str]"]

CONFIG_FILE_NAME = "stew.config.json"
LOCK_FILE_NAME = "Stewfile.lock.json"

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}
_ENV_RE = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


def _home_dir() -> str:
    return str(Path.home())


@dataclass
class StewConfig:
    """The contents of stew.config.json."""

    stew_path: str = ""
    stew_bin_path: str = ""
    excluded_from_upgrade_all: list[str] = field(default_factory=list)


@dataclass
class SystemInfo:
    """The directories and files stew works with."""

    stew_path: str = ""
    stew_bin_path: str = ""
    stew_pkg_path: str = ""
    stew_lock_file_path: str = ""
    stew_tmp_path: str = ""


def get_default_stew_path(user_os: str) -> str:
    """Return the default top-level stew data directory."""
    home = _home_dir()
    if user_os == "windows":
        return os.path.join(home, "AppData", "Local", "stew")
    xdg_data_home = os.environ.get("XDG_DATA_HOME", "")
    if xdg_data_home:
        return os.path.join(xdg_data_home, "stew")
    return os.path.join(home, ".local", "share", "stew")


def get_default_stew_bin_path(user_os: str) -> str:
    """Return the default directory binaries are installed into."""
    home = _home_dir()
    if user_os == "windows":
        return os.path.join(home, "AppData", "Local", "stew", "bin")
    return os.path.join(home, ".local", "bin")


def get_stew_config_file_path(user_os: str) -> str:
    """Return the path of the stew config file."""
    home = _home_dir()
    if user_os == "windows":
        return os.path.join(home, "AppData", "Local", "stew", "Config", CONFIG_FILE_NAME)
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config_home:
        return os.path.join(xdg_config_home, "stew", CONFIG_FILE_NAME)
    return os.path.join(home, ".config", "stew", CONFIG_FILE_NAME)


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string for {key!r}")
    return value


def _string_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"expected a list of strings for {key!r}")
    return list(value)


def _config_from_json(data: Any) -> StewConfig:
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("expected an object for the stew config")
    return StewConfig(
        stew_path=_string(data, "stewPath"),
        stew_bin_path=_string(data, "stewBinPath"),
        excluded_from_upgrade_all=_string_list(data, "excludedFromUpgradeAll"),
    )


def _config_to_json(stew_config: StewConfig) -> dict[str, Any]:
    return {
        "stewPath": stew_config.stew_path,
        "stewBinPath": stew_config.stew_bin_path,
        "excludedFromUpgradeAll": list(stew_config.excluded_from_upgrade_all),
    }


def read_stew_config_json(stew_config_file_path: PathLike) -> StewConfig:
    """Load the stew config from disk."""
    with open(stew_config_file_path, "rb") as handle:
        data = json.loads(handle.read())
    return _config_from_json(data)


def write_stew_config_json(stew_config: StewConfig, output_path: PathLike) -> None:
    """Write the stew config as tab-indented JSON."""
    text = json.dumps(_config_to_json(stew_config), indent="\t", ensure_ascii=False)
    with open(output_path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


def new_stew_config(user_os: str) -> StewConfig:
    """Load the config, filling in defaults, or set it up interactively if there is none.

    The stew directories and the config file are created as needed.
    """
    config_file_path = get_stew_config_file_path(user_os)
    default_stew_path = get_default_stew_path(user_os)
    default_stew_bin_path = get_default_stew_bin_path(user_os)

    if path_exists(config_file_path):
        stew_config = read_stew_config_json(config_file_path)
        stew_config.stew_path = stew_config.stew_path or default_stew_path
        stew_config.stew_bin_path = stew_config.stew_bin_path or default_stew_bin_path
    else:
        stew_path, stew_bin_path, excluded = prompt_config(
            default_stew_path, default_stew_bin_path, [], []
        )
        stew_config = StewConfig(
            stew_path=stew_path,
            stew_bin_path=stew_bin_path,
            excluded_from_upgrade_all=excluded,
        )
        print(f"📄 Updated {green_color(config_file_path)}")

    validate_stew_bin_path(stew_config.stew_bin_path, os.environ.get("PATH", ""))
    _create_stew_dirs_and_files(stew_config, config_file_path)
    return stew_config


def _create_stew_dirs_and_files(stew_config: StewConfig, config_file_path: str) -> None:
    os.makedirs(stew_config.stew_path, mode=0o755, exist_ok=True)
    os.makedirs(os.path.join(stew_config.stew_path, "pkg"), mode=0o755, exist_ok=True)
    os.makedirs(stew_config.stew_bin_path, mode=0o755, exist_ok=True)
    os.makedirs(os.path.dirname(config_file_path), mode=0o755, exist_ok=True)
    write_stew_config_json(stew_config, config_file_path)


def new_system_info(stew_config: StewConfig) -> SystemInfo:
    """Derive the working paths from a config."""
    return SystemInfo(
        stew_path=stew_config.stew_path,
        stew_bin_path=stew_config.stew_bin_path,
        stew_pkg_path=os.path.join(stew_config.stew_path, "pkg"),
        stew_lock_file_path=os.path.join(stew_config.stew_path, LOCK_FILE_NAME),
        stew_tmp_path=os.path.join(stew_config.stew_path, "tmp"),
    )


def current_os() -> str:
    """Return this machine's operating system, e.g. "linux", "darwin" or "windows"."""
    return platform.system().lower()


def current_arch() -> str:
    """Return this machine's architecture, e.g. "amd64", "arm64" or "386"."""
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def initialize() -> tuple[str, str, StewConfig, SystemInfo]:
    """Return the OS, architecture, config and paths stew runs with."""
    user_os = current_os()
    user_arch = current_arch()
    stew_config = new_stew_config(user_os)
    return user_os, user_arch, stew_config, new_system_info(stew_config)


def prompt_config(
    suggested_stew_path: str,
    suggested_stew_bin_path: str,
    installed_packages: Iterable[PackageData],
    excluded_packages: Iterable[str],
) -> tuple[str, str, list[str]]:
    """Ask for the config values; return the resolved paths and the excluded binaries."""
    input_stew_path = prompt_input(
        "Set the stewPath. This will contain all stew data other than the binaries.",
        suggested_stew_path,
    )
    input_stew_bin_path = prompt_input(
        "Set the stewBinPath. This is where the binaries will be installed by stew.",
        suggested_stew_bin_path,
    )
    excluded: list[str] = []
    installed_names = [pkg.binary for pkg in installed_packages]
    if installed_names:
        excluded = prompt_multi_select(
            "Select any packages that you do not wish to be upgraded during stew upgrade --all.",
            installed_names,
            list(excluded_packages),
        )
    return resolve_path(input_stew_path), resolve_path(input_stew_bin_path), excluded


def validate_stew_bin_path(stew_bin_path: str, path_variable: str) -> bool:
    """Warn and return False unless stew_bin_path appears in path_variable."""
    if stew_bin_path in path_variable:
        return True
    print(
        f"{yellow_color('WARNING:')} The stewBinPath {yellow_color(stew_bin_path)} "
        f"is not in your PATH variable.\nYou need to add {yellow_color(stew_bin_path)} to PATH."
    )
    print(
        "Add the following line to your ~/.zshrc or ~/.bashrc file then start a new "
        f'terminal session:\n\nexport PATH="{stew_bin_path}:$PATH"\n'
    )
    return False


def _expand_env(text: str) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group(1) if match.group(1) is not None else match.group(2)
        return os.environ.get(name, "")

    return _ENV_RE.sub(replace, text)


def resolve_path(file_path: str) -> str:
    """Expand quotes, "~" and environment variables into an absolute path."""
    resolved = file_path.replace('"', "")
    if resolved.startswith("~"):
        rest = resolved.lstrip("~").lstrip(os.sep + "/")
        resolved = os.path.normpath(os.path.join(_home_dir(), rest))
    resolved = _expand_env(resolved)
    if not os.path.isabs(resolved):
        resolved = os.path.abspath(resolved)
    return resolved.rstrip("/")