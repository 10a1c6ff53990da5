"""
Protocol signature matchers for raw byte-stream dissection.

Each matcher either returns a decoded result or None (declines):
- Modbus TCP (binary, big-endian MBAP header)
- HTTP request
- Redis RESP array command
- FTP command line
- SMTP command sequence
- WebSocket upgrade handshake
- Telnet IAC negotiation
- Custom fixed binary header (little-endian)
"""

from typing import List, Optional, Tuple

from .types import (
    CustomHeaderResult,
    FtpResult,
    HttpResult,
    ModbusResult,
    RedisResult,
    SmtpResult,
    TelnetResult,
    WebSocketResult,
)
from .utils import (
    decode_text,
    is_plain_text,
    parse_decimal,
    read_u16_be,
    read_u16_le,
    read_u32_le,
    text_lines,
    to_hex,
)


MODBUS_FUNCTION_NAMES = {
    0x01: "Read Coils",
    0x02: "Read Discrete Inputs",
    0x03: "Read Holding Registers",
    0x04: "Read Input Registers",
    0x05: "Write Single Coil",
    0x06: "Write Single Register",
    0x0F: "Write Multiple Coils",
    0x10: "Write Multiple Registers",
}

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "PATCH")

FTP_COMMANDS = ("USER", "PASS", "LIST", "RETR", "STOR", "QUIT")
FTP_SCAN_COMMANDS = ("USER", "PASS", "LIST")

SMTP_KEYWORDS = ("EHLO", "MAIL FROM:", "RCPT TO:", "DATA", "HELO", "SUBJECT:")

TELNET_IAC = 0xFF
TELNET_COMMANDS = {
    0xFB: "WILL",
    0xFC: "WONT",
    0xFD: "DO",
    0xFE: "DONT",
    0xFA: "SB",
    0xF0: "SE",
}
TELNET_OPTIONS = {
    0x01: "Echo",
    0x03: "Suppress-Go-Ahead",
    0x18: "Terminal-Type",
    0x1F: "Negotiate-About-Window-Size",
}

CUSTOM_MAGIC_BYTES = (0xAA, 0xAB, 0x7E)
CUSTOM_HEADER_LENGTH = 15
CUSTOM_MESSAGE_TYPES = {
    0x01: "Request",
    0x02: "Response",
    0x03: "Notify",
    0x04: "Error",
}


def parse_modbus_tcp(payload: bytes) -> Optional[ModbusResult]:
    """
    Detect and decode a Modbus TCP request.

    Layout (big-endian):
    [0-1] Transaction ID  [2-3] Protocol ID (always 0)  [4-5] Length
    [6] Unit ID  [7] Function Code  [8-9] Start Address  [10-11] Register Count

    Args:
        payload: Raw message bytes

    Returns:
        ModbusResult, or None if the payload is not Modbus TCP
    """
    if len(payload) < 8:
        return None

    # Protocol identifier is fixed at zero for Modbus
    protocol_id = read_u16_be(payload, 2)
    if protocol_id != 0:
        return None

    transaction_id = read_u16_be(payload, 0)
    length = read_u16_be(payload, 4)
    unit_id = payload[6]
    function_code = payload[7]

    if len(payload) >= 12:
        start_address = read_u16_be(payload, 8)
        register_count = read_u16_be(payload, 10)
    else:
        start_address = 0
        register_count = 0

    function_name = MODBUS_FUNCTION_NAMES.get(function_code, "Unknown")

    fields = {
        'transaction_id': transaction_id,
        'protocol_id': protocol_id,
        'length': length,
        'unit_id': f"0x{unit_id:02X}",
        'function_code': f"0x{function_code:02X}",
        'function_name': function_name,
        'start_address': f"0x{start_address:04X}",
        'register_count': register_count,
    }

    return ModbusResult(
        transaction_id=transaction_id,
        protocol_id=protocol_id,
        length=length,
        unit_id=unit_id,
        function_code=function_code,
        function_name=function_name,
        start_address=start_address,
        register_count=register_count,
        fields=fields,
    )


def parse_http(payload: bytes) -> Optional[HttpResult]:
    """
    Detect and decode an HTTP/1.x request.

    Args:
        payload: Raw message bytes

    Returns:
        HttpResult, or None if the payload is not an HTTP request
    """
    text = decode_text(payload)
    if text is None:
        return None

    lines = text_lines(text)
    if not lines:
        return None

    # Request line: METHOD SP PATH [SP VERSION]
    request_line = lines[0].split()
    if len(request_line) < 2:
        return None

    method = request_line[0]
    path = request_line[1]
    version = request_line[2] if len(request_line) > 2 else "HTTP/1.1"

    if method not in HTTP_METHODS:
        return None

    host = "unknown"
    content_length = None
    body = None
    headers = {}

    for i, line in enumerate(lines[1:], start=1):
        if line == "":
            if i + 1 < len(lines):
                body = "\n".join(lines[i + 1:])
            break
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        value = value.strip()
        headers[key] = value
        if key == "host":
            host = value
        elif key == "content-length":
            content_length = parse_decimal(value)

    fields = dict(headers)
    fields.update({
        'method': method,
        'path': path,
        'version': version,
        'host': host,
    })
    if content_length is not None:
        fields['content_length'] = content_length
    if body is not None:
        fields['body'] = body

    return HttpResult(
        method=method,
        path=path,
        version=version,
        host=host,
        headers=headers,
        content_length=content_length,
        body=body,
        fields=fields,
    )


def parse_redis_resp(payload: bytes) -> Optional[RedisResult]:
    """
    Detect and decode a Redis RESP array command.

    Format: *3\\r\\n$3\\r\\nSET\\r\\n$4\\r\\nkey\\r\\n$5\\r\\nvalue\\r\\n
    Bulk-string lengths are read but not checked against the data.

    Args:
        payload: Raw message bytes

    Returns:
        RedisResult, or None if the payload is not a RESP array
    """
    text = decode_text(payload)
    if text is None or not text.startswith("*"):
        return None

    parts = text.split("\r\n")
    if len(parts) < 7:
        return None

    array_count = parse_decimal(parts[0][1:])
    if array_count is None or array_count < 1:
        return None

    idx = 1
    values = []
    for position in range(3):
        if idx >= len(parts) or not parts[idx].startswith("$"):
            break
        # Only the command's declared length has to be a number
        if position == 0 and parse_decimal(parts[idx][1:]) is None:
            return None
        idx += 1
        if idx >= len(parts):
            break
        values.append(parts[idx])
        idx += 1

    values += [""] * (3 - len(values))
    command, key, value = values

    fields = {
        'command': command,
        'key': key,
        'value': value,
        'array_count': array_count,
    }

    return RedisResult(
        array_count=array_count,
        command=command,
        key=key,
        value=value,
        fields=fields,
    )


def _match_ftp_command(line: str) -> Tuple[Optional[str], str]:
    """
    Match an upper-cased FTP line against the command vocabulary.

    Returns:
        Tuple of (command or None, username)
    """
    username = "anonymous"
    for command in FTP_COMMANDS:
        if line.startswith(command):
            if command == "USER":
                parts = line.split()
                if len(parts) > 1:
                    username = parts[1]
            return command, username
    return None, username


def parse_ftp(payload: bytes) -> Optional[FtpResult]:
    """
    Detect and decode an FTP command.

    Any plain text is accepted; unrecognized commands are reported as
    "UNKNOWN" rather than declined.

    Args:
        payload: Raw message bytes

    Returns:
        FtpResult, or None if the payload is not plain text
    """
    text = decode_text(payload)
    if text is None or not is_plain_text(text):
        return None

    lines = text_lines(text)
    if not lines:
        return None

    command, username = _match_ftp_command(lines[0].lstrip("\ufeff").strip().upper())

    if command is None:
        # Skip leading blank or garbage lines
        for line in lines[1:]:
            upper = line.strip().upper()
            if upper.startswith(FTP_SCAN_COMMANDS):
                command, username = _match_ftp_command(upper)
                break

    if command is None:
        command = "UNKNOWN"

    fields = {
        'command': command,
        'username': username,
        'raw_command': lines[0],
    }

    return FtpResult(
        command=command,
        username=username,
        raw_command=lines[0],
        fields=fields,
    )


def parse_smtp(payload: bytes) -> Optional[SmtpResult]:
    """
    Detect an SMTP command sequence and extract the envelope.

    Args:
        payload: Raw message bytes

    Returns:
        SmtpResult, or None if no line starts with an SMTP keyword
    """
    text = decode_text(payload)
    if text is None:
        return None

    lines = [line.strip() for line in text_lines(text)]
    if not any(line.upper().startswith(SMTP_KEYWORDS) for line in lines):
        return None

    mail_from = "unknown"
    rcpt_to = "unknown"
    subject = ""

    for line in lines:
        upper = line.upper()
        if upper.startswith("MAIL FROM:"):
            mail_from = line[len("MAIL FROM:"):].strip()
        elif upper.startswith("RCPT TO:"):
            rcpt_to = line[len("RCPT TO:"):].strip()
        elif upper.startswith("SUBJECT:"):
            subject = line[len("SUBJECT:"):].strip()

    fields = {
        'mail_from': mail_from,
        'rcpt_to': rcpt_to,
        'subject': subject,
    }

    return SmtpResult(
        mail_from=mail_from,
        rcpt_to=rcpt_to,
        subject=subject,
        fields=fields,
    )


def parse_websocket(payload: bytes) -> Optional[WebSocketResult]:
    """
    Detect and decode a WebSocket upgrade request.

    Note: any such request is also a valid HTTP GET, so the classifier
    reaches this matcher only for input the HTTP matcher rejected.

    Args:
        payload: Raw message bytes

    Returns:
        WebSocketResult, or None if the payload is not an upgrade request
    """
    text = decode_text(payload)
    if text is None:
        return None

    lines = text_lines(text)
    if not lines:
        return None

    request_line = lines[0].split()
    if len(request_line) < 2 or request_line[0] != "GET":
        return None

    # Loose containment check, not header-name exact
    lowered = [line.lower() for line in lines]
    if not any("upgrade" in line for line in lowered):
        return None
    if not any("connection" in line for line in lowered):
        return None

    host = "unknown"
    key = ""
    version = "13"

    for line in lines[1:]:
        lower = line.lower()
        if lower.startswith("host:"):
            host = line[len("host:"):].strip()
        elif lower.startswith("sec-websocket-key:"):
            key = line[len("sec-websocket-key:"):].strip()
        elif lower.startswith("sec-websocket-version:"):
            version = line[len("sec-websocket-version:"):].strip()

    path = request_line[1]
    http_version = request_line[2] if len(request_line) > 2 else "HTTP/1.1"

    fields = {
        'method': "GET",
        'path': path,
        'http_version': http_version,
        'host': host,
        'sec_websocket_key': key,
        'sec_websocket_version': version,
    }

    return WebSocketResult(
        method="GET",
        path=path,
        http_version=http_version,
        host=host,
        key=key,
        version=version,
        fields=fields,
    )


def parse_telnet(payload: bytes) -> Optional[TelnetResult]:
    """
    Detect and decode Telnet IAC negotiation sequences.

    Every IAC (0xFF) followed by at least two bytes is decoded as
    IAC <command> <option>; the scan then skips the whole triplet.

    Args:
        payload: Raw message bytes

    Returns:
        TelnetResult, or None if the payload carries no IAC byte
    """
    if len(payload) < 3 or TELNET_IAC not in payload:
        return None

    commands: List[str] = []
    i = 0
    while i + 2 < len(payload):
        if payload[i] == TELNET_IAC:
            cmd_name = TELNET_COMMANDS.get(payload[i + 1], "UNKNOWN")
            opt_name = TELNET_OPTIONS.get(payload[i + 2], "Unknown")
            commands.append(f"IAC {cmd_name} {opt_name}")
            i += 3
        else:
            i += 1

    fields = {
        'iac_detected': True,
        'commands': list(commands),
        'data_length': len(payload),
    }

    return TelnetResult(commands=commands, fields=fields)


def parse_custom_header(payload: bytes) -> Optional[CustomHeaderResult]:
    """
    Detect and decode the custom fixed header.

    Layout (little-endian):
    [0-3] Magic  [4-5] Version  [6] Message Type  [7-10] Sequence  [11-14] Payload Length

    Args:
        payload: Raw message bytes

    Returns:
        CustomHeaderResult, or None if the magic byte is not recognized
    """
    if len(payload) < CUSTOM_HEADER_LENGTH:
        return None

    if payload[0] not in CUSTOM_MAGIC_BYTES:
        return None

    magic = to_hex(payload[0:4])
    version = read_u16_le(payload, 4)
    message_type = payload[6]
    sequence = read_u32_le(payload, 7)
    payload_length = read_u32_le(payload, 11)
    message_type_name = CUSTOM_MESSAGE_TYPES.get(message_type, "Unknown")

    fields = {
        'magic_number': magic,
        'version': version,
        'message_type': f"0x{message_type:02X}",
        'message_type_name': message_type_name,
        'sequence': sequence,
        'payload_length': payload_length,
    }

    return CustomHeaderResult(
        magic=magic,
        version=version,
        message_type=message_type,
        message_type_name=message_type_name,
        sequence=sequence,
        payload_length=payload_length,
        fields=fields,
    )
