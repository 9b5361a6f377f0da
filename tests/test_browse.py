import io
import json
import os
import tarfile

import pytest
import requests

from stew.commands.browse import browse
from stew.config import StewConfig, new_system_info, write_stew_config_json
from stew.constants import STEW_OWNER, STEW_REPO
from stew.errors import AbortBinaryOverwriteError, SelfInstallError, UnrecognizedInputError
from stew.models import LockFile, PackageData
from stew.stewfile import calculate_file_hash, read_lock_file_json, write_lock_file_json

RELEASES_URL = "https://api.github.com/repos/owner/tool/releases?per_page=100"
BINARY_CONTENT = b"#!/bin/sh\necho tool\n"
LINUX_ASSET = "tool-linux-amd64.tar.gz"
RELEASES = [("v2.0.0-rc1", True), ("v1.0.0", False), ("v0.9.0", False)]
ASSET_NAMES = [LINUX_ASSET, "tool-darwin-arm64.tar.gz", "checksums.sha256"]


def asset_url(tag, name):
    return f"https://example.com/dl/{tag}/{name}"


def make_tarball(files):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.content = body
        self.headers = {"Content-Length": str(len(body))}

    def iter_content(self, chunk_size=1):
        if self.content:
            yield self.content

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def web(monkeypatch):
    routes = {}

    def fake_get(url, headers=None, **kwargs):
        body = routes.get(url)
        if body is None:
            return FakeResponse(404, b"")
        return FakeResponse(200, body)

    monkeypatch.setattr(requests, "get", fake_get)
    return routes


def serve_github(routes):
    payload = [
        {
            "tag_name": tag,
            "prerelease": prerelease,
            "assets": [
                {"name": name, "url": asset_url(tag, name), "size": 1, "content_type": "application/gzip"}
                for name in ASSET_NAMES
            ],
        }
        for tag, prerelease in RELEASES
    ]
    routes[RELEASES_URL] = json.dumps(payload).encode()
    tarball = make_tarball({"tool": BINARY_CONTENT})
    for tag, _ in RELEASES:
        for name in ASSET_NAMES:
            routes[asset_url(tag, name)] = tarball


def feed_input(monkeypatch, *answers):
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))


@pytest.fixture
def stew_env(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    config_home = tmp_path / "config"
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config = StewConfig(stew_path=str(tmp_path / "stew"), stew_bin_path=str(tmp_path / "bin"))
    monkeypatch.setenv("PATH", config.stew_bin_path + os.pathsep + os.environ.get("PATH", ""))
    config_file = config_home / "stew" / "stew.config.json"
    config_file.parent.mkdir(parents=True)
    write_stew_config_json(config, config_file)
    return new_system_info(config)


def test_browse_installs_selected_asset(web, stew_env, monkeypatch, capsys):
    serve_github(web)
    feed_input(monkeypatch, "v0.9.0", LINUX_ASSET)
    browse("owner/tool")

    lock = read_lock_file_json(stew_env.stew_lock_file_path)
    assert len(lock.packages) == 1
    pkg = lock.packages[0]
    assert (pkg.source, pkg.owner, pkg.repo) == ("github", "owner", "tool")
    assert pkg.tag == "v0.9.0"
    assert pkg.asset == LINUX_ASSET
    assert pkg.url == asset_url("v0.9.0", LINUX_ASSET)
    assert pkg.binary == "tool"
    assert pkg.binary_hash == calculate_file_hash(os.path.join(stew_env.stew_bin_path, "tool"))
    assert "Successfully installed" in capsys.readouterr().out


def test_browse_declined_overwrite_keeps_lock(web, stew_env, monkeypatch):
    serve_github(web)
    os.makedirs(stew_env.stew_path, exist_ok=True)
    existing = PackageData(source="github", owner="owner", repo="tool", tag="v0.9.0", asset="old.tar.gz", binary="tool")
    write_lock_file_json(LockFile(os="linux", arch="amd64", packages=[existing]), stew_env.stew_lock_file_path)
    feed_input(monkeypatch, "v1.0.0", LINUX_ASSET, "n")

    with pytest.raises(AbortBinaryOverwriteError) as excinfo:
        browse("owner/tool")

    assert excinfo.value.binary == "tool"
    assert not os.path.exists(os.path.join(stew_env.stew_pkg_path, LINUX_ASSET))
    assert read_lock_file_json(stew_env.stew_lock_file_path).packages == [existing]


def test_browse_refuses_self_install(web, stew_env):
    with pytest.raises(SelfInstallError):
        browse(f"{STEW_OWNER}/{STEW_REPO}")


def test_browse_rejects_unrecognized_input(stew_env):
    with pytest.raises(UnrecognizedInputError):
        browse("a/b/c")