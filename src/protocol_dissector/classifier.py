"""
Main protocol classifier API.

Applies the matchers in a fixed priority order, from the most
structurally constrained format to the loosest textual heuristic:
Modbus TCP, HTTP, Redis RESP, FTP, SMTP, WebSocket, Telnet, Custom Header.
The first match wins; anything else is reported as UNKNOWN raw data.
"""

import logging
import struct
from typing import Callable, Optional, Sequence, Tuple, Union

from .config import DisplayNames
from .signatures import (
    parse_custom_header,
    parse_ftp,
    parse_http,
    parse_modbus_tcp,
    parse_redis_resp,
    parse_smtp,
    parse_telnet,
    parse_websocket,
)
from .types import ClassificationResult, ProtocolDetail, ProtocolLabel
from .utils import to_ascii, to_hex

logger = logging.getLogger(__name__)

Matcher = Callable[[bytes], Optional[ProtocolDetail]]

# Priority order matters: HTTP shadows WebSocket, FTP accepts most text
MATCHERS: Tuple[Tuple[ProtocolLabel, Matcher], ...] = (
    (ProtocolLabel.MODBUS_TCP, parse_modbus_tcp),
    (ProtocolLabel.HTTP, parse_http),
    (ProtocolLabel.REDIS, parse_redis_resp),
    (ProtocolLabel.FTP, parse_ftp),
    (ProtocolLabel.SMTP, parse_smtp),
    (ProtocolLabel.WEBSOCKET, parse_websocket),
    (ProtocolLabel.TELNET, parse_telnet),
    (ProtocolLabel.CUSTOM_HEADER, parse_custom_header),
)

# Parse errors a matcher may hit on adversarial input; treated as a decline
_DECLINE_ERRORS = (IndexError, ValueError, struct.error, UnicodeDecodeError)


def match_protocol(payload: bytes,
                   matchers: Sequence[Tuple[ProtocolLabel, Matcher]] = MATCHERS
                   ) -> Optional[ProtocolDetail]:
    """
    Run matchers in order and return the first decoded result.

    Args:
        payload: Raw message bytes
        matchers: Ordered (label, matcher) pairs

    Returns:
        Decoded protocol detail, or None if every matcher declined
    """
    for label, matcher in matchers:
        try:
            detail = matcher(payload)
        except _DECLINE_ERRORS as e:
            logger.debug(f"{label.value} matcher failed on {len(payload)} bytes: {e}")
            continue
        if detail is not None:
            logger.debug(f"Matched {label.value} ({len(payload)} bytes)")
            return detail
    return None


def classify(payload: Union[bytes, bytearray, memoryview]) -> ClassificationResult:
    """
    Classify a single message's protocol and extract its fields.

    Args:
        payload: Complete received message (may be empty)

    Returns:
        ClassificationResult; UNKNOWN when no matcher succeeds
    """
    payload = bytes(payload)
    raw_hex = to_hex(payload)
    raw_ascii = to_ascii(payload)

    detail = match_protocol(payload)
    if detail is None:
        logger.debug(f"No protocol signature matched ({len(payload)} bytes)")
        return ClassificationResult(
            label=ProtocolLabel.UNKNOWN,
            display=DisplayNames.UNKNOWN,
            operation="Raw Data",
            fields={
                'data_length': len(payload),
                'preview': raw_ascii,
            },
            raw_hex=raw_hex,
            raw_ascii=raw_ascii,
            message=f"Received unknown data, length: {len(payload)} bytes",
        )

    return ClassificationResult(
        label=detail.label,
        display=detail.display,
        operation=detail.operation,
        fields=detail.fields,
        raw_hex=raw_hex,
        raw_ascii=raw_ascii,
        message=detail.message,
        detail=detail,
    )
