"""
tests/conftest.py — Shared fakes and a throwaway local HTTP server.
"""

import gzip
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests


class DummyResp:
    def __init__(self, status=200, headers=None, body=b"", chunk_error=None):
        self.status_code = status
        self.headers = headers if headers is not None else {"Content-Type": "text/plain"}
        self.body = body
        self.chunk_error = chunk_error
        self.closed = False
        self.raw = self

    def stream(self, amt=1, decode_content=None):
        for i in range(0, len(self.body), amt):
            yield self.body[i:i + amt]
        if self.chunk_error is not None:
            raise self.chunk_error

    def close(self):
        self.closed = True


class DummySession:
    """Stands in for requests.Session; `routes` maps url -> DummyResp or exception."""

    def __init__(self, routes=None, default=None):
        self.routes = routes or {}
        self.default = default
        self.headers = {}
        self.calls = []
        self.lock = threading.Lock()

    def get(self, url, timeout=None, stream=False):
        with self.lock:
            self.calls.append(url)
        target = self.routes.get(url, self.default)
        if target is None:
            raise requests.exceptions.ConnectionError(f"no route for {url}")
        if isinstance(target, Exception):
            raise target
        if callable(target):
            return target(url)
        return target

    def close(self):
        pass


GZIP_BODY = gzip.compress(b"hello" * 100, mtime=0)


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        pass

    def _send(self, status, body=b"", ctype="text/plain", extra=None):
        self.send_response(status)
        self.send_header("Content-Type", ctype)
        self.send_header("Content-Length", str(len(body)))
        for k, v in (extra or {}).items():
            self.send_header(k, v)
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        parts = self.path.strip("/").split("/")
        if parts[0] == "hello":
            self._send(200, b"hello")
        elif parts[0] == "redirect":
            n = int(parts[1])
            if n > 0:
                self._send(302, extra={"Location": f"/redirect/{n - 1}"})
            else:
                self._send(200, b"done")
        elif parts[0] == "big":
            self._send(200, b"x" * int(parts[1]), ctype="application/octet-stream")
        elif parts[0] == "gzip":
            self._send(200, GZIP_BODY, extra={"Content-Encoding": "gzip"})
        elif parts[0] == "echo-ua":
            self._send(200, self.headers.get("User-Agent", "").encode("utf-8"))
        else:
            self._send(404, b"not found")


@pytest.fixture
def http_server(monkeypatch):
    """Base URL of a local server; proxies are bypassed for it."""
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


def read_artifact(path):
    """Split an artifact into (header dict, body bytes)."""
    with open(path, "rb") as f:
        data = f.read()
    head, _, body = data.partition(b"------\n\n")
    headers = {}
    for line in head.decode("utf-8").splitlines():
        k, _, v = line.partition(": ")
        headers[k] = v
    return headers, body
