"""
Protocol Dissector for Raw Byte Streams

Deterministic classification of raw socket payloads into Modbus TCP, HTTP,
Redis RESP, FTP, SMTP, WebSocket handshake, Telnet and a custom fixed header,
with a normalized field mapping per message.
"""

from .classifier import classify, match_protocol, MATCHERS
from .types import (
    ClassificationResult,
    ProtocolLabel,
    FieldValue,
    ModbusResult,
    HttpResult,
    RedisResult,
    FtpResult,
    SmtpResult,
    WebSocketResult,
    TelnetResult,
    CustomHeaderResult,
)

__version__ = "0.1.0"
__all__ = [
    'classify',
    'match_protocol',
    'MATCHERS',
    'ClassificationResult',
    'ProtocolLabel',
    'FieldValue',
    'ModbusResult',
    'HttpResult',
    'RedisResult',
    'FtpResult',
    'SmtpResult',
    'WebSocketResult',
    'TelnetResult',
    'CustomHeaderResult',
]
