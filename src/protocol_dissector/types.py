"""
Type definitions for the protocol dissector.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .config import DisplayNames


FieldValue = Union[str, int, bool, List[str]]
FieldMap = Dict[str, FieldValue]


class ProtocolLabel(Enum):
    """Protocol classification labels."""
    MODBUS_TCP = "Modbus TCP"
    HTTP = "HTTP"
    REDIS = "Redis RESP"
    FTP = "FTP"
    SMTP = "SMTP"
    WEBSOCKET = "WebSocket"
    TELNET = "Telnet"
    CUSTOM_HEADER = "Custom Header"
    UNKNOWN = "Unknown"


@dataclass
class ModbusResult:
    """Decoded Modbus TCP MBAP header and request PDU."""
    transaction_id: int
    protocol_id: int
    length: int
    unit_id: int
    function_code: int
    function_name: str
    start_address: int
    register_count: int
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.MODBUS_TCP

    @property
    def display(self) -> str:
        return DisplayNames.MODBUS_TCP

    @property
    def operation(self) -> str:
        return f"Function Code 0x{self.function_code:02X} - {self.function_name}"

    @property
    def message(self) -> str:
        return (f"Modbus request: function_code={self.function_code}, "
                f"start_address={self.start_address}, register_count={self.register_count}")


@dataclass
class HttpResult:
    """Decoded HTTP request line, headers and body."""
    method: str
    path: str
    version: str
    host: str
    headers: Dict[str, str]
    content_length: Optional[int] = None
    body: Optional[str] = None
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.HTTP

    @property
    def display(self) -> str:
        return f"{DisplayNames.HTTP} {self.method}"

    @property
    def operation(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def message(self) -> str:
        return f"HTTP request: {self.method} {self.path}, Host: {self.host}"


@dataclass
class RedisResult:
    """Decoded RESP array command (first three bulk strings)."""
    array_count: int
    command: str
    key: str
    value: str
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.REDIS

    @property
    def display(self) -> str:
        return DisplayNames.REDIS

    @property
    def operation(self) -> str:
        return f"Redis Command: {self.command}"

    @property
    def message(self) -> str:
        return f"Redis command: {self.command} {self.key} {self.value}"


@dataclass
class FtpResult:
    """Decoded FTP command line."""
    command: str
    username: str
    raw_command: str
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.FTP

    @property
    def display(self) -> str:
        return DisplayNames.FTP

    @property
    def operation(self) -> str:
        return f"FTP Command: {self.command}"

    @property
    def message(self) -> str:
        return f"FTP command: {self.command}, user: {self.username}"


@dataclass
class SmtpResult:
    """Envelope and subject extracted from SMTP command lines."""
    mail_from: str
    rcpt_to: str
    subject: str
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.SMTP

    @property
    def display(self) -> str:
        return DisplayNames.SMTP

    @property
    def operation(self) -> str:
        return f"Mail from: {self.mail_from}"

    @property
    def message(self) -> str:
        return f"SMTP mail: from={self.mail_from}, to={self.rcpt_to}"


@dataclass
class WebSocketResult:
    """Decoded WebSocket upgrade request."""
    method: str
    path: str
    http_version: str
    host: str
    key: str
    version: str
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.WEBSOCKET

    @property
    def display(self) -> str:
        return DisplayNames.WEBSOCKET

    @property
    def operation(self) -> str:
        return "WebSocket Upgrade Handshake"

    @property
    def message(self) -> str:
        return f"WebSocket handshake: Host={self.host}, Key={self.key}"


@dataclass
class TelnetResult:
    """Decoded Telnet IAC negotiation sequences."""
    commands: List[str]
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.TELNET

    @property
    def command(self) -> str:
        return "; ".join(self.commands)

    @property
    def display(self) -> str:
        return DisplayNames.TELNET

    @property
    def operation(self) -> str:
        return "Telnet Option Negotiation"

    @property
    def message(self) -> str:
        return f"Telnet commands: {self.command}"


@dataclass
class CustomHeaderResult:
    """Decoded 15-byte custom fixed header."""
    magic: str
    version: int
    message_type: int
    message_type_name: str
    sequence: int
    payload_length: int
    fields: FieldMap = field(default_factory=dict)

    label = ProtocolLabel.CUSTOM_HEADER

    @property
    def display(self) -> str:
        return DisplayNames.CUSTOM_HEADER

    @property
    def operation(self) -> str:
        return f"Message Type: 0x{self.message_type:02X}"

    @property
    def message(self) -> str:
        return (f"Custom protocol: magic={self.magic}, version={self.version}, "
                f"type={self.message_type}, sequence={self.sequence}")


ProtocolDetail = Union[
    ModbusResult,
    HttpResult,
    RedisResult,
    FtpResult,
    SmtpResult,
    WebSocketResult,
    TelnetResult,
    CustomHeaderResult,
]


@dataclass
class ClassificationResult:
    """Classification result for a single received message."""
    label: ProtocolLabel
    display: str
    operation: str
    fields: FieldMap
    raw_hex: str
    raw_ascii: str
    message: str
    detail: Optional[ProtocolDetail] = None  # None for UNKNOWN

    @property
    def data_length(self) -> int:
        """Number of input bytes, recovered from the ASCII rendering."""
        return len(self.raw_ascii)

    def to_dict(self) -> Dict[str, Any]:
        """Response shape sent back to clients."""
        return {
            'protocol': self.label.value,
            'protocol_display': self.display,
            'operation': self.operation,
            'fields': dict(self.fields),
            'raw_hex': self.raw_hex,
            'raw_ascii': self.raw_ascii,
            'message': self.message,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
