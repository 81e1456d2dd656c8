"""
Unit tests for connection handling and the server glue.
"""

import logging
import socket
import threading
from concurrent.futures import Future
from dataclasses import replace

import pytest

from webserver import HTTPServer
from webserver.core import Connection, ConnectionState, RequestTooLarge
from webserver.http.errors import InternalConsistencyViolation
from webserver.http.response import ok


def make_connection(sock, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 54321), **kwargs)


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


class TestConnection:
    """Tests for Connection over a socket pair."""

    def test_reads_head_only(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"POST / HTTP/1.1\r\nHost: a\r\n\r\nignored body")

        conn = make_connection(server_side)

        assert conn.read_request() == "POST / HTTP/1.1\r\nHost: a"
        assert conn.state == ConnectionState.READING

    def test_head_split_across_packets(self, socket_pair):
        server_side, client_side = socket_pair
        conn = make_connection(server_side, buffer_size=4)

        client_side.sendall(b"GET /foo HTTP/1.1\r\n")
        client_side.sendall(b"Host: localhost\r\n\r\n")

        assert conn.read_request() == "GET /foo HTTP/1.1\r\nHost: localhost"

    def test_peer_closes_without_blank_line(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /foo HTTP/1.1")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == "GET /foo HTTP/1.1"

    def test_nothing_sent(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() is None

    def test_request_too_large(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /" + b"a" * 200)

        conn = make_connection(server_side, max_request_size=64)
        with pytest.raises(RequestTooLarge):
            conn.read_request()

    def test_body_in_same_packet_not_counted(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"POST / HTTP/1.1\r\nHost: a\r\n\r\n" + b"x" * 500)

        conn = make_connection(server_side, max_request_size=32)
        assert conn.read_request() == "POST / HTTP/1.1\r\nHost: a"

    def test_head_exactly_at_limit(self, socket_pair):
        server_side, client_side = socket_pair
        head = b"GET /" + b"a" * 27
        client_side.sendall(head + b"\r\n\r\n")

        conn = make_connection(server_side, max_request_size=len(head))
        assert conn.read_request() == head.decode()

    def test_head_one_byte_over_limit(self, socket_pair):
        server_side, client_side = socket_pair
        head = b"GET /" + b"a" * 28
        client_side.sendall(head + b"\r\n\r\n")

        conn = make_connection(server_side, max_request_size=len(head) - 1)
        with pytest.raises(RequestTooLarge):
            conn.read_request()

    def test_read_timeout(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET / HTTP/1.1\r\n")

        conn = make_connection(server_side, timeout=0.1)
        with pytest.raises(TimeoutError):
            conn.read_request()

    def test_send_and_close(self, socket_pair):
        server_side, client_side = socket_pair

        with make_connection(server_side) as conn:
            assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n")

        assert conn.state == ConnectionState.CLOSED
        assert recv_all(client_side) == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_close_twice(self, socket_pair):
        conn = make_connection(socket_pair[0])
        conn.close()
        conn.close()
        assert conn.state == ConnectionState.CLOSED

    def test_client_ip(self, socket_pair):
        assert make_connection(socket_pair[0]).client_ip == "127.0.0.1"


class TestHandleRequestText:
    """Tests for HTTPServer.handle_request_text()."""

    def test_serves_file(self, config):
        server = HTTPServer(config)
        data = server.handle_request_text("GET /hello.txt HTTP/1.1\r\nHost: x")

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"\r\nContent-Length: 13\r\n" in data
        assert data.endswith(b"\r\n\r\nHello, World!")

    def test_parse_error_is_400(self, config):
        data = HTTPServer(config).handle_request_text("")

        assert data.startswith(b"HTTP/1.1 400 BAD REQUEST\r\n")
        assert data.endswith(b"\r\n\r\nEmpty request")

    def test_malformed_header_is_400(self, config):
        data = HTTPServer(config).handle_request_text("GET / HTTP/1.1\r\nbroken")
        assert data.startswith(b"HTTP/1.1 400 BAD REQUEST\r\n")

    def test_handler_error_is_500(self, config, caplog):
        def broken_handler(request):
            raise RuntimeError("boom")

        server = HTTPServer(config, handler=broken_handler)
        with caplog.at_level(logging.ERROR, logger="webserver.server"):
            data = server.handle_request_text("GET / HTTP/1.1")

        assert data.startswith(b"HTTP/1.1 500 INTERNAL SERVER ERROR\r\n")
        assert b"boom" not in data
        assert "boom" in caplog.text

    def test_parser_defect_is_500(self, config, monkeypatch):
        def defective_parse(text):
            raise InternalConsistencyViolation("tokens out of order")

        monkeypatch.setattr("webserver.server.parse_request", defective_parse)

        data = HTTPServer(config).handle_request_text("GET / HTTP/1.1")
        assert data.startswith(b"HTTP/1.1 500 INTERNAL SERVER ERROR\r\n")

    def test_custom_handler(self, config):
        server = HTTPServer(config, handler=lambda request: ok(request.url))
        data = server.handle_request_text("GET /echo?x=1 HTTP/1.1")

        assert data.endswith(b"\r\n\r\n/echo?x=1")

    def test_access_log(self, config, caplog):
        with caplog.at_level(logging.INFO, logger="webserver.server"):
            HTTPServer(config).handle_request_text("GET /nope HTTP/1.1", client="10.0.0.1")

        assert '10.0.0.1 "GET /nope HTTP/1.1" 404' in caplog.text

    def test_long_path_is_404(self, config):
        data = HTTPServer(config).handle_request_text("GET /" + "a" * 300 + " HTTP/1.1\r\n\r\n")
        assert data.startswith(b"HTTP/1.1 404 NOT FOUND\r\n")

    def test_handler_returning_wrong_type_is_500(self, config, caplog):
        server = HTTPServer(config, handler=lambda request: "not a response")

        with caplog.at_level(logging.ERROR, logger="webserver.server"):
            data = server.handle_request_text("GET / HTTP/1.1")

        assert data.startswith(b"HTTP/1.1 500 INTERNAL SERVER ERROR\r\n")
        assert "not HTTPResponse" in caplog.text

    def test_unrenderable_response_is_500(self, config):
        def sloppy_handler(request):
            response = ok("hi")
            response.headers.append("X-Raw: 1")
            return response

        data = HTTPServer(config, handler=sloppy_handler).handle_request_text("GET / HTTP/1.1")
        assert data.startswith(b"HTTP/1.1 500 INTERNAL SERVER ERROR\r\n")
        assert b"X-Raw" not in data

    def test_worker_failure_logged(self, caplog):
        future = Future()
        future.set_exception(RuntimeError("worker blew up"))

        with caplog.at_level(logging.ERROR, logger="webserver.server"):
            HTTPServer._log_worker_failure(future)

        assert "Worker failed" in caplog.text
        assert "worker blew up" in caplog.text

    def test_worker_success_not_logged(self, caplog):
        future = Future()
        future.set_result(None)

        with caplog.at_level(logging.DEBUG, logger="webserver.server"):
            HTTPServer._log_worker_failure(future)

        assert caplog.text == ""

    def test_missing_root(self, config, tmp_path):
        with pytest.raises(ValueError):
            HTTPServer(replace(config, root_dir=str(tmp_path / "missing")))


class TestServerIntegration:
    """Full round trip over a real TCP socket."""

    @pytest.fixture
    def running_server(self, config):
        server = HTTPServer(replace(config, port=0))
        server.bind()

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()

        yield server

        server.shutdown()
        thread.join(timeout=5.0)

    def request(self, server, raw: bytes) -> bytes:
        with socket.create_connection(server.address, timeout=5.0) as sock:
            sock.sendall(raw)
            return recv_all(sock)

    def test_get(self, running_server):
        data = self.request(running_server, b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")
        assert data.endswith(b"<h1>Home</h1>")

    def test_head(self, running_server):
        data = self.request(running_server, b"HEAD /hello.txt HTTP/1.1\r\n\r\n")

        assert b"Content-Length: 13\r\n" in data
        assert data.endswith(b"\r\n\r\n")

    def test_bad_request(self, running_server):
        data = self.request(running_server, b"garbage\r\n\r\n")
        assert data.startswith(b"HTTP/1.1 400 BAD REQUEST\r\n")

    def test_concurrent_clients(self, running_server):
        results = []

        def client():
            results.append(self.request(running_server, b"GET /hello.txt HTTP/1.1\r\n\r\n"))

        threads = [threading.Thread(target=client) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5.0)

        assert len(results) == 8
        assert all(r.endswith(b"Hello, World!") for r in results)
