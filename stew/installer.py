"""Downloading release assets and installing the binaries inside them."""

from __future__ import annotations

import bz2
import gzip
import lzma
import os
import shutil
import stat
import subprocess
import tarfile
import zipfile
from typing import Iterator, Optional, Sequence, Union

import requests
from tqdm import tqdm

from .config import SystemInfo
from .constants import yellow_color
from .errors import (
    AbortBinaryOverwriteError,
    BinaryMismatchError,
    ExitUserSelectionError,
    NonZeroStatusCodeDownloadError,
)
from .models import LockFile
from .stewfile import calculate_file_hash, remove_package
from .ui import Spinner, prompt_rename_binary, warning_prompt_confirm, warning_prompt_select

PathLike = Union[str, "os.PathLike[str]"]

_SPINNER = Spinner()
_CHUNK = 1 << 16
_COMPRESSED_FORMATS = (
    (b"\x1f\x8b", gzip.open, ".gz"),
    (b"BZh", bz2.open, ".bz2"),
    (b"\xfd7zXZ\x00", lzma.open, ".xz"),
)


def _unarchiver_available() -> bool:
    return shutil.which("lsar") is not None and shutil.which("unar") is not None


def _remove_all(path: PathLike) -> None:
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return
    if stat.S_ISDIR(mode):
        shutil.rmtree(path)
    else:
        os.remove(path)


def _archive_kind(file_path: PathLike) -> Optional[str]:
    try:
        if tarfile.is_tarfile(file_path):
            return "tar"
        if zipfile.is_zipfile(file_path):
            return "zip"
        with open(file_path, "rb") as handle:
            header = handle.read(6)
    except OSError:
        return None
    if any(header.startswith(magic) for magic, _, _ in _COMPRESSED_FORMATS):
        return "compressed"
    return None


def is_archive_file(file_path: PathLike) -> bool:
    """Return whether file_path is an archive that can be extracted."""
    if _unarchiver_available():
        try:
            result = subprocess.run(
                ["lsar", "-no-recursion", os.fspath(file_path)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            return False
        return result.returncode == 0
    return _archive_kind(file_path) is not None


def is_executable_file(file_path: PathLike) -> bool:
    """Return whether any execute bit is set on file_path."""
    return os.stat(file_path).st_mode & 0o111 != 0


def _download_headers(url: str) -> dict[str, str]:
    if "api.github.com" not in url:
        return {}
    headers = {"Accept": "application/octet-stream"}
    github_token = os.environ.get("GITHUB_TOKEN", "")
    if github_token:
        headers["Authorization"] = f"token {github_token}"
    return headers


def _content_length(response: requests.Response) -> Optional[int]:
    try:
        length = int(response.headers.get("Content-Length", ""))
    except ValueError:
        return None
    return length if length >= 0 else None


def download_file(download_path: PathLike, url: str) -> None:
    """Download url to download_path, showing progress."""
    _SPINNER.start()
    try:
        response = requests.get(url, headers=_download_headers(url), stream=True)
    finally:
        _SPINNER.stop()

    with response:
        if response.status_code != 200:
            raise NonZeroStatusCodeDownloadError(response.status_code)
        with open(download_path, "wb") as output, tqdm(
            total=_content_length(response),
            desc="⬇️  Downloading asset:",
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
        ) as bar:
            for chunk in response.iter_content(_CHUNK):
                output.write(chunk)
                bar.update(len(chunk))


def copy_file(src_file: PathLike, dest_file: PathLike) -> None:
    """Copy a file's contents and make the copy executable."""
    shutil.copyfile(src_file, dest_file)
    os.chmod(dest_file, 0o755)


def _walk(path: str) -> Iterator[str]:
    mode = os.lstat(path).st_mode
    if stat.S_ISREG(mode):
        yield path
    elif stat.S_ISDIR(mode):
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def walk_dir(root_dir: PathLike) -> list[str]:
    """Return every regular file under root_dir, in lexical walk order."""
    return list(_walk(os.fspath(root_dir)))


def get_binary(
    file_paths: Sequence[str], desired_binary_rename: str, expected_binary_hash: str
) -> tuple[str, str, str]:
    """Pick the binary among file_paths; return its path, its name and its hash.

    A file whose hash matches expected_binary_hash is taken at once. Otherwise the
    single executable file is used, and the user is asked when there is not exactly one.
    """
    executables: list[tuple[str, str]] = []
    for full_path in file_paths:
        executable = is_executable_file(full_path)
        file_hash = calculate_file_hash(full_path)
        if desired_binary_rename and expected_binary_hash and expected_binary_hash == file_hash:
            return full_path, desired_binary_rename, expected_binary_hash
        if executable:
            executables.append((full_path, file_hash))

    if len(executables) != 1:
        chosen = warning_prompt_select(
            "Could not automatically detect the binary. Please select it manually:",
            list(file_paths),
        )
        binary_name = prompt_rename_binary(os.path.basename(chosen))
        return chosen, binary_name, calculate_file_hash(chosen)

    path, file_hash = executables[0]
    if desired_binary_rename:
        if expected_binary_hash and expected_binary_hash != file_hash:
            raise BinaryMismatchError(desired_binary_rename)
        return path, desired_binary_rename, file_hash
    return path, os.path.basename(path), file_hash


def _extract_tar(archive_path: str, destination: str) -> None:
    with tarfile.open(archive_path) as archive:
        if hasattr(tarfile, "data_filter"):
            archive.extractall(destination, filter="data")
        else:
            archive.extractall(destination)


def _extract_zip(archive_path: str, destination: str) -> None:
    with zipfile.ZipFile(archive_path) as archive:
        for info in archive.infolist():
            extracted = archive.extract(info, destination)
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                os.chmod(extracted, mode)


def _decompress(archive_path: str, destination: str) -> None:
    with open(archive_path, "rb") as handle:
        header = handle.read(6)
    for magic, opener, suffix in _COMPRESSED_FORMATS:
        if header.startswith(magic):
            name = os.path.basename(archive_path)
            target = os.path.join(destination, name.removesuffix(suffix) or name)
            with opener(archive_path, "rb") as source, open(target, "wb") as output:
                shutil.copyfileobj(source, output)
            return
    raise ValueError(f"unrecognised archive: {archive_path}")


def _extract_archive(archive_path: str, destination: str) -> None:
    if _unarchiver_available():
        subprocess.run(
            ["unar", "-quiet", "-no-directory", "-force-overwrite", "-o", destination, archive_path],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=True,
        )
        return
    os.makedirs(destination, mode=0o755, exist_ok=True)
    kind = _archive_kind(archive_path)
    if kind == "tar":
        _extract_tar(archive_path, destination)
    elif kind == "zip":
        _extract_zip(archive_path, destination)
    else:
        _decompress(archive_path, destination)


def extract_binary(
    downloaded_file_path: PathLike, tmp_extraction_path: PathLike, desired_binary_rename: str
) -> None:
    """Unpack an archive into tmp_extraction_path, or copy a bare binary there."""
    downloaded = os.fspath(downloaded_file_path)
    tmp_path = os.fspath(tmp_extraction_path)
    if is_archive_file(downloaded):
        _extract_archive(downloaded, tmp_path)
        return
    binary_name = desired_binary_rename or prompt_rename_binary(os.path.basename(downloaded))
    copy_file(downloaded, os.path.join(tmp_path, binary_name))


def install_binary(
    downloaded_file_path: PathLike,
    repo: str,
    system_info: SystemInfo,
    lock_file: LockFile,
    overwrite_from_upgrade: bool,
    desired_binary_rename: str = "",
    expected_binary_hash: str = "",
) -> tuple[str, str]:
    """Extract the binary from a download and install it; return its name and hash.

    lock_file is updated in place when an existing binary is replaced by a new install.
    """
    tmp_path = system_info.stew_tmp_path
    extract_binary(downloaded_file_path, tmp_path, desired_binary_rename)
    binary_path, binary_name, binary_hash = get_binary(
        walk_dir(tmp_path), desired_binary_rename, expected_binary_hash
    )
    _handle_existing_binary(
        lock_file,
        binary_name,
        os.fspath(downloaded_file_path),
        system_info.stew_pkg_path,
        overwrite_from_upgrade,
    )
    copy_file(binary_path, os.path.join(system_info.stew_bin_path, binary_name))
    _remove_all(tmp_path)
    return binary_name, binary_hash


def _handle_existing_binary(
    lock_file: LockFile,
    binary_name: str,
    new_asset_path: str,
    stew_pkg_path: str,
    overwrite_from_upgrade: bool,
) -> None:
    index = lock_file.find_binary(binary_name)
    if index is None:
        return
    pkg = lock_file.packages[index]
    if not overwrite_from_upgrade:
        try:
            overwrite = warning_prompt_confirm(
                f"The binary {yellow_color(binary_name)} version: {yellow_color(pkg.tag)} "
                "is already installed, would you like to overwrite it?"
            )
        except ExitUserSelectionError:
            _remove_all(new_asset_path)
            raise
        if not overwrite:
            _remove_all(new_asset_path)
            raise AbortBinaryOverwriteError(binary_name)

    previous_asset_path = os.path.join(stew_pkg_path, pkg.asset)
    if previous_asset_path != new_asset_path:
        _remove_all(previous_asset_path)
    # An upgrade updates the entry in place; a fresh install appends a new one.
    if not overwrite_from_upgrade:
        lock_file.packages = remove_package(lock_file.packages, index)