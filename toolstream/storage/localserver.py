"""Loopback HTTP server exposing a local directory as storage.

Implements the server half of the protocol ``HttpStorage`` speaks:

- ``GET /<name>`` streams the file's content (404 if missing);
- ``GET /<prefix>*`` returns matching names, sorted, one per line;
- ``PUT /<name>`` writes the request body, creating parent directories.

Names resolving outside the served directory are refused with 403.
"""

from __future__ import annotations

import http.server
import logging
import os
import shutil
import threading
from pathlib import Path
from urllib.parse import unquote

logger = logging.getLogger(__name__)


class _StorageHTTPServer(http.server.ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, server_address, RequestHandlerClass, *, root: Path) -> None:
        super().__init__(server_address, RequestHandlerClass)
        self.root = root


class _StorageRequestHandler(http.server.BaseHTTPRequestHandler):
    server_version = "toolstream-localstorage/1.0"

    def log_message(self, format, *args):  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)

    @property
    def _root(self) -> Path:
        return self.server.root  # type: ignore[attr-defined]

    def _name(self) -> str:
        return unquote(self.path.split("?", 1)[0]).lstrip("/")

    def _resolve(self, name: str) -> Path | None:
        target = (self._root / name).resolve()
        if target != self._root and self._root not in target.parents:
            return None
        return target

    def _send_body(self, status: int, body: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):  # noqa: N802
        name = self._name()
        if name.endswith("*"):
            self._list(name[:-1])
            return
        target = self._resolve(name)
        if target is None:
            self.send_error(403, "path outside storage root")
            return
        if not target.is_file():
            self.send_error(404, f"{name} not found")
            return
        with target.open("rb") as fh:
            self.send_response(200)
            self.send_header("Content-Type", "application/octet-stream")
            self.send_header("Content-Length", str(os.fstat(fh.fileno()).st_size))
            self.end_headers()
            shutil.copyfileobj(fh, self.wfile)

    def _list(self, prefix: str) -> None:
        names = sorted(
            path.relative_to(self._root).as_posix()
            for path in self._root.rglob("*")
            if path.is_file()
        )
        matching = [name for name in names if name.startswith(prefix)]
        body = "".join(f"{name}\n" for name in matching).encode("utf-8")
        self._send_body(200, body, "text/plain; charset=utf-8")

    def do_PUT(self):  # noqa: N802
        name = self._name()
        target = self._resolve(name)
        if target is None or target == self._root:
            self.send_error(403, "path outside storage root")
            return
        length = int(self.headers.get("Content-Length", "0") or "0")
        body = self.rfile.read(length)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(body)
        except OSError as exc:
            logger.error("Writing %s failed: %s", target, exc)
            self.send_error(500, f"cannot write {name}: {exc.strerror or exc}")
            return
        self._send_body(201, b"", "text/plain; charset=utf-8")


class LocalStorageServer:
    """Serves *directory* on a loopback address until closed.

    Port ``0`` picks an ephemeral port; :attr:`address` reports the one
    actually bound. Usable as a context manager.
    """

    def __init__(self, directory: Path | str, host: str = "127.0.0.1", port: int = 0) -> None:
        self._root = Path(directory).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._server = _StorageHTTPServer((host, port), _StorageRequestHandler, root=self._root)
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="toolstream-localstorage",
            daemon=True,
        )
        self._thread.start()
        logger.info("Serving %s on %s", self._root, self.address)

    @property
    def address(self) -> str:
        host, port = self._server.server_address[:2]
        return f"{host}:{port}"

    @property
    def root(self) -> Path:
        return self._root

    def close(self) -> None:
        if self._thread.is_alive():
            self._server.shutdown()
            self._thread.join(timeout=5)
        self._server.server_close()
        logger.debug("Stopped serving %s", self._root)

    def __enter__(self) -> LocalStorageServer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def serve(directory: Path | str, address: str = "127.0.0.1:0") -> LocalStorageServer:
    """Start serving *directory* at *address* (``host:port``)."""
    host, _, port = address.rpartition(":")
    return LocalStorageServer(directory, host=host or "127.0.0.1", port=int(port or 0))
