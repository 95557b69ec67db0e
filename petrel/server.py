"""
petrel/server.py — Threaded TCP server core.
Accepts connections on one listening socket and hands each one to a
bounded worker pool.  A connection is a single receive, a single response
and a close: no keep-alive, no chunking, no TLS.
"""

import os
import socket
import sys
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from petrel.colors import format_request_log, format_response_log
from petrel.dispatcher import Dispatcher
from petrel.filestore import FileStore
from petrel.parser import printable
from petrel.responses import server_error_response

# Default Configuration
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 4221
DEFAULT_WORKERS = 32
BACKLOG = 5                         # pending-connection queue depth
RECV_SIZE = 1024                    # fixed receive buffer; more is answered 414
RECV_TIMEOUT = 10.0                 # seconds before a silent client is dropped
ACCEPT_POLL = 1.0                   # seconds between shutdown checks

log = logging.getLogger("petrel")


@dataclass(frozen=True)
class ServerConfig:
    """
    Process-wide settings, fixed at startup and shared read-only by workers.
    Attributes:
        directory: Root for the /files/ routes ("" means the working directory)
        host: Bind address
        port: Bind port (0 picks a free port)
        workers: Worker-pool size
        recv_size: Receive buffer size in bytes
        recv_timeout: Per-connection receive timeout in seconds
        contain_paths: Reject file paths that resolve outside their root
    """
    directory: str = ""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    workers: int = DEFAULT_WORKERS
    recv_size: int = RECV_SIZE
    recv_timeout: float = RECV_TIMEOUT
    contain_paths: bool = False


def _safe_send(sock: socket.socket, data: bytes) -> bool:
    """Send data, returning False if client disconnected."""
    try:
        sock.sendall(data)
        return True
    except OSError:
        return False


class Server:
    """
    A configurable petrel server instance.
    Attributes:
        config: The ServerConfig in effect
        dispatcher: Callable turning request bytes into a Dispatch
    """

    def __init__(self, config: ServerConfig, dispatcher: Optional[Dispatcher] = None):
        self.config = config
        self.dispatcher = dispatcher or Dispatcher(
            FileStore(config.directory, contain_paths=config.contain_paths)
        )
        self._stop = threading.Event()
        self._slots = threading.BoundedSemaphore(2 * config.workers)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._server_socket: Optional[socket.socket] = None

    @property
    def address(self) -> tuple:
        """(host, port) actually bound; only valid after bind()."""
        if self._server_socket is None:
            raise RuntimeError("server socket is not bound")
        return self._server_socket.getsockname()[:2]

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def signal_exit(self):
        """Signal the accept loop to stop; in-flight connections still finish."""
        self._stop.set()

    def bind(self):
        """Create, bind and listen.  Raises OSError on setup failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        if sys.platform == "win32":
            sock.setsockopt(
                socket.SOL_SOCKET, socket.SO_EXCLUSIVEADDRUSE, 1  # type: ignore[attr-defined]
            )
        else:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(BACKLOG)
        except OSError as e:
            log.error("Failed to bind to %s:%s - %s", self.config.host, self.config.port, e)
            sock.close()
            raise

        sock.settimeout(ACCEPT_POLL)
        self._server_socket = sock

    def shutdown(self):
        """Stop accepting, close the listening socket and join the workers."""
        self._stop.set()
        if self._server_socket:
            try:
                self._server_socket.close()
            except OSError:
                pass
            self._server_socket = None
        if self._executor:
            self._executor.shutdown(wait=True)
            self._executor = None

    def serve(self):
        """Accept connections until signal_exit() is called."""
        if self._server_socket is None:
            self.bind()
        host, port = self.address

        self._executor = ThreadPoolExecutor(
            max_workers=self.config.workers, thread_name_prefix="petrel-worker"
        )
        log.info("Started server process [%d]", os.getpid())
        log.info("Listening on http://%s:%s", host, port)

        try:
            while not self._stop.is_set():
                try:
                    client_socket, client_addr = self._server_socket.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if self._stop.is_set():
                        break
                    log.error("accept() failed", exc_info=True)
                    continue

                log.debug("New connection from %s:%s", client_addr[0], client_addr[1])
                if not self._wait_for_slot():
                    client_socket.close()
                    break
                future = self._executor.submit(
                    self._handle_connection, client_socket, client_addr
                )
                future.add_done_callback(self._release_slot)
        finally:
            self.shutdown()
            log.info("Server stopped")

    def _wait_for_slot(self) -> bool:
        """Block until a worker slot frees up; False once shutdown is signalled."""
        while not self._slots.acquire(timeout=ACCEPT_POLL):
            if self._stop.is_set():
                return False
        return True

    def _release_slot(self, future: Future):
        self._slots.release()

    def _handle_connection(self, client_socket: socket.socket, client_addr: tuple):
        """Receive one request, send one response, close."""
        sent = False
        try:
            client_socket.settimeout(self.config.recv_timeout)
            try:
                raw = client_socket.recv(self.config.recv_size + 1)
            except socket.timeout:
                log.warning("%s:%s  timed out before sending a request", *client_addr[:2])
                return
            except OSError as exc:
                log.warning("%s:%s  recv error: %s", client_addr[0], client_addr[1], exc)
                return

            if not raw:
                log.debug("%s:%s  closed without a request", *client_addr[:2])
                return

            overflow = len(raw) > self.config.recv_size
            if overflow:
                log.warning(
                    "%s:%s  request exceeds the %d byte receive buffer",
                    client_addr[0], client_addr[1], self.config.recv_size,
                )
                raw = raw[:self.config.recv_size]

            result = self.dispatcher.dispatch(raw, overflow)
            request = result.request
            method, target = printable(request.method), "/" + printable(request.path)
            log.debug(
                format_request_log(client_addr[0], client_addr[1], method, target)
            )

            sent = True
            if not _safe_send(client_socket, result.response):
                log.warning(
                    "%s:%s  client disconnected during response",
                    client_addr[0], client_addr[1],
                )
            log.info(
                format_response_log(
                    client_addr[0], client_addr[1],
                    method, target,
                    result.status_code,
                )
            )
        except Exception:
            log.error("Fatal error in connection handler", exc_info=True)
            if not sent:
                _safe_send(client_socket, server_error_response())
        finally:
            try:
                client_socket.close()
            except OSError:
                pass
            log.debug("%s:%s  connection closed", client_addr[0], client_addr[1])


def run(config: ServerConfig):
    """Serve with an already-built ServerConfig."""
    server = Server(config)
    server.serve()


def serve(directory: str = "", host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, **options):
    """
    Serve *directory* for the /files/ routes.
    Args:
        directory: Root for /files/ GET and POST
        host: Host address to bind to
        port: Port number to bind to
        options: Remaining ServerConfig fields
    """
    run(ServerConfig(directory=directory, host=host, port=port, **options))
