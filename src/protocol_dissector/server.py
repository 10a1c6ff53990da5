"""
TCP classification service.

Every chunk read from a connection is treated as one message: it is
classified and answered with the JSON response followed by a blank line.
"""

import logging
import socket
import threading
from typing import Optional, Tuple

from .classifier import classify
from .config import (
    ACCEPT_TIMEOUT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    LISTEN_BACKLOG,
    READ_BUFFER_SIZE,
    RESPONSE_TERMINATOR,
)
from .export import format_result

logger = logging.getLogger(__name__)


class DissectorServer:
    """Answers each received chunk with its classification result."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
        self.host = host
        self.port = port
        self.running = False
        self.server_socket: Optional[socket.socket] = None

    def bind(self) -> Tuple[str, int]:
        """
        Open the listening socket.

        Returns:
            Bound (host, port); port is resolved when 0 was requested
        """
        self.server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server_socket.bind((self.host, self.port))
        self.server_socket.listen(LISTEN_BACKLOG)
        self.server_socket.settimeout(ACCEPT_TIMEOUT)
        self.host, self.port = self.server_socket.getsockname()[:2]
        self.running = True
        logger.info(f"Listening on {self.host}:{self.port}")
        return self.host, self.port

    def serve_forever(self):
        """Accept connections until stop() is called."""
        server_socket = self.server_socket
        if server_socket is None:
            raise RuntimeError("serve_forever() called before bind()")

        try:
            while self.running:
                try:
                    client_sock, addr = server_socket.accept()
                except socket.timeout:
                    continue
                except OSError as e:
                    if self.running:
                        logger.warning(f"Accept error: {e}")
                    break

                logger.info(f"New connection from {addr[0]}:{addr[1]}")
                thread = threading.Thread(
                    target=self.handle_client,
                    args=(client_sock, addr),
                    daemon=True,
                )
                thread.start()
        finally:
            self.stop()

    def start(self):
        """Bind and serve until interrupted."""
        self.bind()
        try:
            self.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
            self.stop()

    def stop(self):
        """Stop the accept loop and close the listening socket."""
        self.running = False
        server_socket, self.server_socket = self.server_socket, None
        if server_socket is not None:
            server_socket.close()

    def handle_client(self, client_sock: socket.socket, addr: Tuple[str, int]):
        """Classify every chunk received on one connection."""
        message_count = 0
        with client_sock:
            while True:
                try:
                    data = client_sock.recv(READ_BUFFER_SIZE)
                except OSError as e:
                    logger.warning(f"Read error from {addr[0]}:{addr[1]}: {e}")
                    break

                if not data:
                    logger.info(f"Connection closed by {addr[0]}:{addr[1]}")
                    break

                message_count += 1
                result = classify(data)
                logger.info(f"[{message_count}] {result.label.value} - {result.operation}")
                logger.debug(format_result(result))

                try:
                    client_sock.sendall(result.to_json().encode("utf-8") + RESPONSE_TERMINATOR)
                except OSError as e:
                    logger.warning(f"Send error to {addr[0]}:{addr[1]}: {e}")
                    break

        logger.info(f"Connection {addr[0]}:{addr[1]} done (total messages: {message_count})")
