"""Reading and writing the Stewfile and Stewfile.lock.json, and file helpers they need."""

from __future__ import annotations

import hashlib
import json
import os
import shutil
import stat
from typing import Sequence, Union

from .constants import green_color
from .errors import IndexOutOfBoundsInLockfileError, NoPackagesInLockfileError
from .models import LockFile, PackageData
from .parsing import parse_cli_input

PathLike = Union[str, "os.PathLike[str]"]

_JSON_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)
_HASH_CHUNK = 1 << 16


def path_exists(path: PathLike) -> bool:
    """Return whether path exists; other errors while checking are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def _remove_all(path: PathLike) -> None:
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return
    if stat.S_ISDIR(mode):
        shutil.rmtree(path)
    else:
        os.remove(path)


def _dump_json(data: object) -> str:
    text = json.dumps(data, indent="\t", ensure_ascii=False)
    for raw, escaped in _JSON_ESCAPES:
        text = text.replace(raw, escaped)
    return text


def read_lock_file_json(lock_file_path: PathLike) -> LockFile:
    """Load a lockfile from disk."""
    with open(lock_file_path, "rb") as handle:
        data = json.loads(handle.read())
    return LockFile.from_dict(data)


def write_lock_file_json(lock_file: LockFile, output_path: PathLike) -> None:
    """Write lock_file as tab-indented JSON and report the update."""
    text = _dump_json(lock_file.to_dict())
    with open(output_path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    print(f"📄 Updated {green_color(os.fspath(output_path))}")


def remove_package(pkgs: Sequence[PackageData], index: int) -> list[PackageData]:
    """Return a new list without the package at index."""
    if not pkgs:
        raise NoPackagesInLockfileError()
    if index < 0 or index >= len(pkgs):
        raise IndexOutOfBoundsInLockfileError()
    return [*pkgs[:index], *pkgs[index + 1 :]]


def read_stewfile_contents(stewfile_path: PathLike) -> list[PackageData]:
    """Parse every line of a Stewfile into a package."""
    with open(stewfile_path, encoding="utf-8", newline="") as handle:
        text = handle.read()
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [parse_cli_input(line.removesuffix("\r")) for line in lines]


def read_stew_lock_file_contents(lock_file_path: PathLike) -> list[PackageData]:
    """Return the packages recorded in a lockfile."""
    return read_lock_file_json(lock_file_path).packages


def new_lock_file(stew_lock_file_path: PathLike, user_os: str, user_arch: str) -> LockFile:
    """Load the lockfile, or start an empty one for this OS and arch if there is none."""
    if not path_exists(stew_lock_file_path):
        return LockFile(os=user_os, arch=user_arch, packages=[])
    return read_lock_file_json(stew_lock_file_path)


def delete_asset_and_binary(
    stew_pkg_path: PathLike, stew_bin_path: PathLike, asset: str, binary: str
) -> None:
    """Remove a downloaded asset and its installed binary; missing ones are ignored."""
    _remove_all(os.path.join(stew_pkg_path, asset))
    _remove_all(os.path.join(stew_bin_path, binary))


def calculate_file_hash(file_path: PathLike) -> str:
    """Return the hex SHA-256 digest of a file."""
    hasher = hashlib.sha256()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_HASH_CHUNK), b""):
            hasher.update(chunk)
    return hasher.hexdigest()