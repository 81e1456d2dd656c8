"""
pytest configuration and fixtures.
"""

import socket
from typing import Generator

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import ServerConfig
from webserver.handlers import StaticFileHandler


@pytest.fixture
def simple_request() -> str:
    """Minimal GET request with a single Host header."""
    return "GET /foo HTTP/1.1\r\nHost: localhost:8080\r\n\r\n"


@pytest.fixture
def firefox_request() -> str:
    """Request as sent by a desktop browser, every recognised header present."""
    return (
        "GET /hello.html HTTP/1.1\r\n"
        "Host: localhost:8080\r\n"
        "User-Agent: Mozilla/5.0 (Macintosh; Intel Mac OS X 10.12; rv:58.0) "
        "Gecko/20100101 Firefox/58.0\r\n"
        "Accept: text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8\r\n"
        "Accept-Language: en,en-US;q=0.7,de;q=0.3\r\n"
        "Accept-Encoding: gzip, deflate\r\n"
        "Referer: http://localhost:8080/index.html\r\n"
        "Cookie: JSESSIONID=node0ag061949mqugevd0gpoadofu2.node0;\r\n"
        "Connection: keep-alive\r\n"
        "Upgrade-Insecure-Requests: 1\r\n"
        "Cache-Control: max-age=0\r\n"
        "\r\n"
    )


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    Document root with a small site:

        index.html
        hello.txt
        data.bin
        css/site.css
        docs/index.html
    """
    (tmp_path / "index.html").write_text("<h1>Home</h1>", encoding="utf-8")
    (tmp_path / "hello.txt").write_text("Hello, World!", encoding="utf-8")
    (tmp_path / "data.bin").write_bytes(b"\x00\x01\x02\x03")
    (tmp_path / "css").mkdir()
    (tmp_path / "css" / "site.css").write_text("body { margin: 0; }", encoding="utf-8")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.html").write_text("<h1>Docs</h1>", encoding="utf-8")
    return tmp_path


@pytest.fixture
def handler(doc_root: Path) -> StaticFileHandler:
    return StaticFileHandler(doc_root, server_name="webserver/test")


@pytest.fixture
def config(doc_root: Path) -> ServerConfig:
    """Test server configuration serving ``doc_root``."""
    return ServerConfig(
        host="127.0.0.1",
        port=8080,
        root_dir=str(doc_root),
        max_workers=2,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """Connected (server side, client side) sockets, no network needed."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for sock in (server_side, client_side):
        try:
            sock.close()
        except OSError:
            pass
