"""
Shared fixtures: a throwaway HTTP site on localhost.
"""

import socket
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

# Ensure project root on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from linkcheck.robots import RobotsChecker


class _SiteHandler(BaseHTTPRequestHandler):
    """Serves server.routes: path -> (status, headers, body), with keep-alive."""

    protocol_version = "HTTP/1.1"

    def do_GET(self):
        path = self.path.split("?", 1)[0]
        self.server.hits.append(path)
        self.server.client_ports.append(self.client_address[1])
        status, headers, body = self.server.routes.get(path, (404, {"Content-Type": "text/plain"}, "not found"))
        data = body.encode("utf-8") if isinstance(body, str) else body
        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        pass


class LocalSite:
    """Handle on the running test server."""

    def __init__(self, server: ThreadingHTTPServer):
        self.server = server
        host, port = server.server_address[:2]
        self.url = f"http://{host}:{port}/"

    @property
    def routes(self) -> dict:
        return self.server.routes

    @property
    def hits(self) -> list:
        return self.server.hits

    @property
    def client_ports(self) -> list:
        """Client-side port of the connection behind each request."""
        return self.server.client_ports

    def page(self, path: str, *links: str, status: int = 200) -> None:
        """Register an HTML page linking to the given hrefs."""
        anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
        self.routes[path] = (status, {"Content-Type": "text/html; charset=utf-8"},
                             f"<html><body>{anchors}</body></html>")

    def redirect(self, path: str, location: str, status: int = 301) -> None:
        self.routes[path] = (status, {"Location": location}, "")


@pytest.fixture
def local_site():
    """HTTP server on 127.0.0.1 with an initially empty route table."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SiteHandler)
    server.daemon_threads = True
    server.routes = {}
    server.hits = []
    server.client_ports = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield LocalSite(server)
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def closed_port_url():
    """URL on localhost where nothing is listening."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    return f"http://127.0.0.1:{port}/"


@pytest.fixture(autouse=True)
def clear_robots_cache():
    RobotsChecker.clear_cache()
    yield
    RobotsChecker.clear_cache()
