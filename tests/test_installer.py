import io
import os
import stat
import tarfile
import threading
import zipfile
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest
import requests

from stew.config import StewConfig, new_system_info
from stew.errors import (
    AbortBinaryOverwriteError,
    BinaryMismatchError,
    ExitUserSelectionError,
    NonZeroStatusCodeDownloadError,
)
from stew.installer import (
    copy_file,
    download_file,
    extract_binary,
    get_binary,
    install_binary,
    is_archive_file,
    is_executable_file,
    walk_dir,
)
from stew.models import LockFile, PackageData
from stew.stewfile import calculate_file_hash

PAYLOAD = b"binary payload for download"
ASSET = "ppath-v0.0.3-darwin-arm64.tar.gz"


def _write(path, data, mode):
    path.write_bytes(data)
    os.chmod(path, mode)
    return path


def _answers(monkeypatch, *answers):
    remaining = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(remaining))


def _refuse_input(monkeypatch):
    def fail(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", fail)


def _make_tarball(path):
    members = [("ppath-dir/ppath", b"#!/bin/sh\necho ppath\n", 0o755), ("ppath-dir/README.md", b"readme", 0o644)]
    with tarfile.open(path, "w:gz") as archive:
        for name, data, mode in members:
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            archive.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture
def system_info(tmp_path):
    root = tmp_path / "stew"
    info = new_system_info(StewConfig(stew_path=str(root), stew_bin_path=str(root / "bin")))
    for directory in (info.stew_bin_path, info.stew_pkg_path, info.stew_tmp_path):
        os.makedirs(directory)
    return info


def _lock_file(asset=ASSET):
    return LockFile(
        os="darwin",
        arch="arm64",
        packages=[
            PackageData(
                source="github",
                owner="marwanhawari",
                repo="ppath",
                tag="v0.0.3",
                asset=asset,
                binary="ppath",
                url="https://example.com/" + asset,
            )
        ],
    )


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        self.server.seen_headers.append({k: v for k, v in self.headers.items()})
        if self.path.endswith("/missing"):
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        self.send_response(200)
        self.send_header("Content-Length", str(len(PAYLOAD)))
        self.end_headers()
        self.wfile.write(PAYLOAD)

    def log_message(self, *args):
        pass


@pytest.fixture
def server(monkeypatch):
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    httpd = HTTPServer(("127.0.0.1", 0), _Handler)
    httpd.seen_headers = []
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()


def test_is_archive_file_plain_text(tmp_path):
    path = _write(tmp_path / "notArchive", b"just some text\n", 0o644)
    assert is_archive_file(path) is False


def test_is_archive_file_tarball(tmp_path):
    assert is_archive_file(_make_tarball(tmp_path / "Archive.tar.gz")) is True


def test_is_archive_file_zip(tmp_path):
    path = tmp_path / "Archive.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("tool", b"data")
    assert is_archive_file(path) is True


@pytest.mark.parametrize("mode, expected", [(0o755, True), (0o644, False)])
def test_is_executable_file(tmp_path, mode, expected):
    path = _write(tmp_path / "file", b"contents", mode)
    assert is_executable_file(path) is expected


def test_is_executable_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        is_executable_file(tmp_path / "absent")


def test_copy_file(tmp_path):
    src = _write(tmp_path / "sourceFile.txt", b"A test file", 0o644)
    dest = tmp_path / "destFile.txt"
    copy_file(src, dest)
    assert dest.read_bytes() == b"A test file"
    assert src.exists()
    assert stat.S_IMODE(os.stat(dest).st_mode) == 0o755


def test_walk_dir(tmp_path):
    (tmp_path / "testFile.txt").write_text("A test file")
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "binDirTestFile.txt").write_text("Another test file")
    assert walk_dir(tmp_path) == [
        os.path.join(str(tmp_path), "bin", "binDirTestFile.txt"),
        os.path.join(str(tmp_path), "testFile.txt"),
    ]


@pytest.mark.parametrize("binary_name", ["testBinary", "testBinary.exe"])
def test_get_binary(tmp_path, binary_name):
    binary = _write(tmp_path / binary_name, b"An executable file", 0o755)
    other = _write(tmp_path / "testNonBinary", b"Not an executable file", 0o644)
    result = get_binary([str(binary), str(other)], "", "")
    assert result == (str(binary), binary_name, calculate_file_hash(binary))


def test_get_binary_no_executable_and_prompt_exits(tmp_path, monkeypatch):
    other = _write(tmp_path / "testNonBinary", b"Not an executable file", 0o644)
    _refuse_input(monkeypatch)
    with pytest.raises(ExitUserSelectionError):
        get_binary([str(other)], "", "")


def test_get_binary_manual_selection(tmp_path, monkeypatch, capsys):
    first = _write(tmp_path / "a", b"one", 0o644)
    second = _write(tmp_path / "b", b"two", 0o644)
    _answers(monkeypatch, "2", "renamed")
    assert get_binary([str(first), str(second)], "", "") == (
        str(second),
        "renamed",
        calculate_file_hash(second),
    )


def test_get_binary_matching_hash_wins(tmp_path):
    plain = _write(tmp_path / "data", b"payload", 0o644)
    expected_hash = calculate_file_hash(plain)
    assert get_binary([str(plain)], "tool", expected_hash) == (str(plain), "tool", expected_hash)


def test_get_binary_rename_without_hash(tmp_path):
    binary = _write(tmp_path / "orig", b"exe", 0o755)
    assert get_binary([str(binary)], "tool", "") == (str(binary), "tool", calculate_file_hash(binary))


def test_get_binary_hash_mismatch(tmp_path):
    binary = _write(tmp_path / "orig", b"exe", 0o755)
    with pytest.raises(BinaryMismatchError) as excinfo:
        get_binary([str(binary)], "tool", "0" * 64)
    assert excinfo.value.binary_name == "tool"


def test_download_file(tmp_path, server):
    target = tmp_path / "asset.bin"
    download_file(target, f"http://127.0.0.1:{server.server_port}/asset.bin")
    assert target.read_bytes() == PAYLOAD


def test_download_file_github_headers(tmp_path, server, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    target = tmp_path / "asset.bin"
    download_file(target, f"http://127.0.0.1:{server.server_port}/api.github.com/asset")
    headers = server.seen_headers[-1]
    assert headers["Accept"] == "application/octet-stream"
    assert headers["Authorization"] == "token token"


def test_download_file_not_found(tmp_path, server):
    target = tmp_path / "missing"
    with pytest.raises(NonZeroStatusCodeDownloadError) as excinfo:
        download_file(target, f"http://127.0.0.1:{server.server_port}/missing")
    assert excinfo.value.status_code == 404
    assert not target.exists()


def test_download_file_empty_url(tmp_path):
    with pytest.raises(requests.exceptions.RequestException):
        download_file(tmp_path / "x", "")


def test_extract_binary_plain_file(tmp_path):
    source = _write(tmp_path / "tool-linux", b"#!/bin/sh\n", 0o644)
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    extract_binary(source, tmp_dir, "tool")
    extracted = tmp_dir / "tool"
    assert extracted.read_bytes() == b"#!/bin/sh\n"
    assert stat.S_IMODE(os.stat(extracted).st_mode) == 0o755


def test_extract_binary_tarball(tmp_path):
    archive = _make_tarball(tmp_path / ASSET)
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    extract_binary(archive, tmp_dir, "")
    names = sorted(os.path.basename(path) for path in walk_dir(tmp_dir))
    assert names == ["README.md", "ppath"]


def test_install_binary_upgrade(system_info):
    downloaded = _make_tarball(os.path.join(system_info.stew_pkg_path, ASSET))
    lock_file = _lock_file()
    name, binary_hash = install_binary(downloaded, "ppath", system_info, lock_file, True, "", "")
    installed = os.path.join(system_info.stew_bin_path, "ppath")
    assert name == "ppath"
    assert binary_hash == calculate_file_hash(installed)
    assert stat.S_IMODE(os.stat(installed).st_mode) == 0o755
    assert not os.path.exists(system_info.stew_tmp_path)
    assert [pkg.binary for pkg in lock_file.packages] == ["ppath"]
    assert os.path.exists(downloaded)


def test_install_binary_prompt_exit_removes_download(system_info, monkeypatch):
    downloaded = _make_tarball(os.path.join(system_info.stew_pkg_path, ASSET))
    _refuse_input(monkeypatch)
    with pytest.raises(ExitUserSelectionError):
        install_binary(downloaded, "ppath", system_info, _lock_file(), False, "", "")
    assert not os.path.exists(downloaded)


def test_install_binary_declined(system_info, monkeypatch, capsys):
    downloaded = _make_tarball(os.path.join(system_info.stew_pkg_path, ASSET))
    _answers(monkeypatch, "n")
    with pytest.raises(AbortBinaryOverwriteError) as excinfo:
        install_binary(downloaded, "ppath", system_info, _lock_file(), False, "", "")
    assert excinfo.value.binary == "ppath"
    assert not os.path.exists(downloaded)
    assert not os.path.exists(os.path.join(system_info.stew_bin_path, "ppath"))


def test_install_binary_confirmed_overwrite(system_info, monkeypatch, capsys):
    old_asset = os.path.join(system_info.stew_pkg_path, "old.tar.gz")
    with open(old_asset, "wb") as handle:
        handle.write(b"old")
    downloaded = _make_tarball(os.path.join(system_info.stew_pkg_path, ASSET))
    lock_file = _lock_file(asset="old.tar.gz")
    _answers(monkeypatch, "y")
    name, _ = install_binary(downloaded, "ppath", system_info, lock_file, False, "", "")
    assert name == "ppath"
    assert lock_file.packages == []
    assert not os.path.exists(old_asset)
    assert os.path.exists(os.path.join(system_info.stew_bin_path, "ppath"))