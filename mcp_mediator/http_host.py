"""Reference HTTP host for the MCP mediator.

Serves one JSON-RPC endpoint: ``POST <path>`` hands the body to
``McpMediator.handle`` and always answers ``200 application/json``; JSON-RPC
errors travel inside the body. Each request runs on its own thread with its
own cancellation token, cancelled when ``request_timeout_sec`` elapses.

Notes
-----
Production deployments usually let their own web stack own the HTTP layer and
call ``McpMediator.handle`` directly. Authentication is not enforced here.
"""

from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Tuple, Type

from .core.logging_config import get_logger
from .mcp.server import McpMediator
from .outcome import CancellationToken

__all__ = ["McpHttpServer"]

logger = get_logger(__name__)

_MAX_BODY_BYTES = 4 * 1024 * 1024
_STARTUP_PAUSE_SEC = 0.05
_SHUTDOWN_JOIN_SEC = 2.0


def _make_handler(mediator: McpMediator, path: str, timeout_sec: float) -> Type[BaseHTTPRequestHandler]:
    class _Handler(BaseHTTPRequestHandler):
        server_version = "mcp-mediator/0.1"
        protocol_version = "HTTP/1.1"

        def log_message(self, fmt, *args):  # route access logs through logging
            logger.debug("http %s", fmt % args)

        def _send(self, status: int, body: bytes, content_type: str = "application/json") -> None:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _path_matches(self) -> bool:
            return self.path.split("?", 1)[0].rstrip("/") == path.rstrip("/")

        def do_POST(self) -> None:
            if not self._path_matches():
                self._send(404, b'{"error":"not found"}')
                return

            try:
                length = int(self.headers.get("Content-Length") or 0)
            except ValueError:
                length = 0
            if length > _MAX_BODY_BYTES:
                self._send(413, b'{"error":"request body too large"}')
                return
            body = self.rfile.read(length) if length > 0 else b""

            token = CancellationToken()
            timer = threading.Timer(timeout_sec, token.cancel, args=("Request timed out",))
            timer.daemon = True
            timer.start()
            started = time.perf_counter()
            try:
                payload = mediator.handle(body, token)
            finally:
                timer.cancel()

            logger.info(
                "Served MCP request",
                extra={"duration_ms": int((time.perf_counter() - started) * 1000), "bytes_in": length},
            )
            try:
                self._send(200, payload.encode("utf-8"))
            except OSError:
                # Client went away before the response was written
                token.cancel("Client disconnected")

        def _method_not_allowed(self) -> None:
            body = b'{"error":"method not allowed"}'
            self.send_response(405)
            self.send_header("Allow", "POST")
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        do_GET = _method_not_allowed
        do_PUT = _method_not_allowed
        do_DELETE = _method_not_allowed

    return _Handler


class McpHttpServer:
    """Threaded HTTP server around a mediator."""

    def __init__(
        self,
        mediator: McpMediator,
        host: str = "127.0.0.1",
        port: int = 8080,
        path: str = "/mcp",
        request_timeout_sec: float = 60.0,
    ) -> None:
        self.mediator = mediator
        self.host = self._normalize_host(host)
        self.port = port
        self.path = path if path.startswith("/") else f"/{path}"
        self.request_timeout_sec = request_timeout_sec
        self._httpd: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        if self._httpd is None:
            return self.host, self.port
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    @property
    def url(self) -> str:
        host, port = self.address
        return f"http://{host}:{port}{self.path}"

    def start(self) -> None:
        """Bind and serve on a background thread."""
        handler = _make_handler(self.mediator, self.path, self.request_timeout_sec)
        httpd = ThreadingHTTPServer((self.host, self.port), handler)
        httpd.daemon_threads = True
        self._httpd = httpd

        t = threading.Thread(target=httpd.serve_forever, name="mcp-http", daemon=True)
        t.start()
        self._thread = t
        # Give the listener a moment before callers connect
        time.sleep(_STARTUP_PAUSE_SEC)
        logger.info("MCP HTTP host listening", extra={"url": self.url})

    def serve_forever(self) -> None:
        """Serve on the calling thread until interrupted."""
        if self._httpd is None:
            handler = _make_handler(self.mediator, self.path, self.request_timeout_sec)
            self._httpd = ThreadingHTTPServer((self.host, self.port), handler)
            self._httpd.daemon_threads = True
        logger.info("MCP HTTP host listening", extra={"url": self.url})
        self._httpd.serve_forever()

    def stop(self) -> None:
        httpd, self._httpd = self._httpd, None
        thread, self._thread = self._thread, None
        if httpd is None:
            return
        # shutdown() blocks unless serve_forever is running on another thread
        if thread is not None:
            httpd.shutdown()
            thread.join(timeout=_SHUTDOWN_JOIN_SEC)
        httpd.server_close()

    @staticmethod
    def _normalize_host(host: str) -> str:
        """Prefer IPv4 loopback for 'localhost' to avoid IPv6-only binds."""
        return "127.0.0.1" if host in {"localhost", "::1"} else host
