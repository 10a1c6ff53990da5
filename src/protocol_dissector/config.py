"""
Configuration constants for the protocol dissector.

Centralizes network defaults, limits, and display names.
"""

# Network service defaults
DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 18080
READ_BUFFER_SIZE: int = 4096
ACCEPT_TIMEOUT: float = 0.5  # seconds, lets stop() interrupt the accept loop
LISTEN_BACKLOG: int = 5
RESPONSE_TERMINATOR: bytes = b"\n\n"

# Security limits
MAX_INPUT_BYTES: int = 10 * 1024 * 1024  # 10 MB

# Logging
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class DisplayNames:
    """Human-readable protocol labels."""
    MODBUS_TCP = "Modbus TCP (MBAP Header + PDU)"
    HTTP = "HTTP/1.1"  # suffixed with the request method
    REDIS = "Redis Serialization Protocol (RESP)"
    FTP = "File Transfer Protocol"
    SMTP = "Simple Mail Transfer Protocol"
    WEBSOCKET = "WebSocket Handshake (RFC 6455)"
    TELNET = "Telnet Protocol (RFC 854)"
    CUSTOM_HEADER = "Custom Protocol Header"
    UNKNOWN = "Unknown Protocol"
