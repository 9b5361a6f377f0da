import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest import mock

import pytest

from stew.errors import NonZeroStatusCodeError
from stew.http import get_http_response_body


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        if self.path == "/ok":
            status, body = 200, b'{"test":"ok"}'
        else:
            status, body = 403, b""
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def server_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_ok_response_returns_body(server_url):
    assert get_http_response_body(server_url + "/ok") == '{"test":"ok"}'


def test_forbidden_response_raises(server_url):
    with pytest.raises(NonZeroStatusCodeError) as info:
        get_http_response_body(server_url + "/forbidden")
    assert info.value.status_code == 403


def _fake_response():
    response = mock.MagicMock()
    response.status_code = 200
    response.content = b"[]"
    return response


def test_github_api_sends_accept_and_token(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    url = "https://api.github.com/repos/o/r/releases?per_page=100"
    with mock.patch("stew.http.requests.get", return_value=_fake_response()) as get:
        assert get_http_response_body(url) == "[]"
    headers = get.call_args.kwargs["headers"]
    assert headers["Accept"] == "application/vnd.github.v3+json"
    assert headers["Authorization"] == "token token"


def test_github_api_without_token_has_no_authorization(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    url = "https://api.github.com/search/repositories?q=x"
    with mock.patch("stew.http.requests.get", return_value=_fake_response()) as get:
        body = get_http_response_body(url)
    assert body == "[]"
    headers = get.call_args.kwargs["headers"]
    assert "Authorization" not in headers
    assert headers["Accept"] == "application/vnd.github.v3+json"


def test_other_hosts_get_no_extra_headers(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    with mock.patch("stew.http.requests.get", return_value=_fake_response()) as get:
        body = get_http_response_body("https://example.com/file")
    assert body == "[]"
    assert get.call_args.kwargs["headers"] == {}