"""
Unit tests for binary protocol matchers (Modbus TCP, Telnet, custom header).
"""

import unittest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from protocol_dissector.signatures import (
    parse_modbus_tcp,
    parse_telnet,
    parse_custom_header,
)


class TestModbusSignature(unittest.TestCase):
    """Test Modbus TCP detection."""

    def test_read_holding_registers(self):
        """Test a full 12-byte Read Holding Registers request."""
        # Transaction ID: 0x0001
        # Protocol ID: 0x0000
        # Length: 0x0006
        # Unit ID: 0x01, Function Code: 0x03
        # Start Address: 0x0000, Register Count: 0x0001
        request = bytes([0x00, 0x01, 0x00, 0x00, 0x00, 0x06, 0x01, 0x03,
                         0x00, 0x00, 0x00, 0x01])

        result = parse_modbus_tcp(request)
        self.assertIsNotNone(result)
        self.assertEqual(result.transaction_id, 1)
        self.assertEqual(result.protocol_id, 0)
        self.assertEqual(result.length, 6)
        self.assertEqual(result.unit_id, 0x01)
        self.assertEqual(result.function_code, 0x03)
        self.assertEqual(result.start_address, 0)
        self.assertEqual(result.register_count, 1)
        self.assertEqual(result.function_name, "Read Holding Registers")

        self.assertEqual(result.fields['unit_id'], "0x01")
        self.assertEqual(result.fields['function_code'], "0x03")
        self.assertEqual(result.fields['start_address'], "0x0000")
        self.assertEqual(result.fields['register_count'], 1)
        self.assertEqual(result.fields['transaction_id'], 1)
        self.assertEqual(result.operation, "Function Code 0x03 - Read Holding Registers")

    def test_big_endian_fields(self):
        """Test that multi-byte fields are decoded big-endian."""
        request = bytes([0x12, 0x34, 0x00, 0x00, 0x00, 0x06, 0x11, 0x10,
                         0x01, 0x02, 0x00, 0x0A])
        result = parse_modbus_tcp(request)
        self.assertEqual(result.transaction_id, 0x1234)
        self.assertEqual(result.start_address, 0x0102)
        self.assertEqual(result.register_count, 10)
        self.assertEqual(result.fields['start_address'], "0x0102")
        self.assertEqual(result.function_name, "Write Multiple Registers")

    def test_short_request_defaults(self):
        """Test an 8-byte header without address/count."""
        request = bytes([0x00, 0x05, 0x00, 0x00, 0x00, 0x02, 0x11, 0x2B])
        result = parse_modbus_tcp(request)
        self.assertIsNotNone(result)
        self.assertEqual(result.start_address, 0)
        self.assertEqual(result.register_count, 0)
        self.assertEqual(result.function_name, "Unknown")
        self.assertEqual(result.fields['function_code'], "0x2B")

    def test_nonzero_protocol_id(self):
        """Test that a non-zero protocol identifier is rejected."""
        request = bytes([0x00, 0x01, 0x00, 0x01, 0x00, 0x06, 0x01, 0x03,
                         0x00, 0x00, 0x00, 0x01])
        self.assertIsNone(parse_modbus_tcp(request))

    def test_too_short(self):
        """Test payload shorter than the MBAP header."""
        self.assertIsNone(parse_modbus_tcp(bytes([0x00, 0x01, 0x00, 0x00, 0x00, 0x06, 0x01])))
        self.assertIsNone(parse_modbus_tcp(b""))


class TestTelnetSignature(unittest.TestCase):
    """Test Telnet IAC detection."""

    def test_single_negotiation(self):
        """Test IAC WILL Terminal-Type."""
        result = parse_telnet(bytes([0xFF, 0xFB, 0x18]))
        self.assertIsNotNone(result)
        self.assertEqual(result.commands, ["IAC WILL Terminal-Type"])
        self.assertEqual(result.command, "IAC WILL Terminal-Type")
        self.assertTrue(result.fields['iac_detected'])
        self.assertEqual(result.fields['data_length'], 3)

    def test_multiple_negotiations(self):
        """Test several back-to-back IAC triplets."""
        payload = bytes([0xFF, 0xFD, 0x01, 0xFF, 0xFB, 0x03, 0xFF, 0xFA, 0x1F])
        result = parse_telnet(payload)
        self.assertEqual(result.commands, [
            "IAC DO Echo",
            "IAC WILL Suppress-Go-Ahead",
            "IAC SB Negotiate-About-Window-Size",
        ])
        self.assertEqual(
            result.command,
            "IAC DO Echo; IAC WILL Suppress-Go-Ahead; IAC SB Negotiate-About-Window-Size"
        )

    def test_unknown_command_and_option(self):
        """Test IAC embedded in data with unrecognized bytes."""
        result = parse_telnet(b"A\xff\x99\x42")
        self.assertEqual(result.commands, ["IAC UNKNOWN Unknown"])

    def test_trailing_iac_without_triplet(self):
        """Test IAC too close to the end to form a triplet."""
        result = parse_telnet(b"ab\xff")
        self.assertIsNotNone(result)
        self.assertEqual(result.commands, [])
        self.assertEqual(result.fields['commands'], [])

    def test_no_iac(self):
        """Test payload without IAC marker."""
        self.assertIsNone(parse_telnet(bytes([0x01, 0x02, 0x03])))

    def test_too_short(self):
        """Test payload shorter than one triplet."""
        self.assertIsNone(parse_telnet(bytes([0xFF, 0xFB])))


class TestCustomHeaderSignature(unittest.TestCase):
    """Test custom fixed header detection."""

    def test_valid_header(self):
        """Test a header with little-endian numeric fields."""
        header = bytes([
            0xAA, 0xBB, 0xCC, 0xDD,  # Magic
            0x02, 0x00,  # Version: 2 (LE)
            0x02,  # Message Type: Response
            0x05, 0x00, 0x00, 0x00,  # Sequence: 5 (LE)
            0x10, 0x00, 0x00, 0x00,  # Payload Length: 16 (LE)
        ])
        result = parse_custom_header(header)
        self.assertIsNotNone(result)
        self.assertEqual(result.magic, "AA BB CC DD")
        self.assertEqual(result.version, 2)
        self.assertEqual(result.message_type, 0x02)
        self.assertEqual(result.message_type_name, "Response")
        self.assertEqual(result.sequence, 5)
        self.assertEqual(result.payload_length, 16)
        self.assertEqual(result.fields['magic_number'], "AA BB CC DD")
        self.assertEqual(result.fields['message_type'], "0x02")
        self.assertEqual(result.operation, "Message Type: 0x02")

    def test_little_endian_sequence(self):
        """Test that big-endian looking bytes decode as little-endian."""
        header = bytes([0xAB, 0x00, 0x00, 0x00, 0x01, 0x00, 0x09,
                        0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x10])
        result = parse_custom_header(header)
        self.assertEqual(result.version, 1)
        self.assertEqual(result.sequence, 0x01000000)
        self.assertEqual(result.payload_length, 0x10000000)
        self.assertEqual(result.message_type_name, "Unknown")

    def test_tilde_magic(self):
        """Test the 0x7E magic byte."""
        header = bytes([0x7E, 0x01, 0x02, 0x03, 0x01, 0x00, 0x03,
                        0x07, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00])
        result = parse_custom_header(header)
        self.assertEqual(result.message_type_name, "Notify")
        self.assertEqual(result.sequence, 7)

    def test_invalid_magic(self):
        """Test rejected magic byte."""
        header = bytes([0xAC] + [0x00] * 14)
        self.assertIsNone(parse_custom_header(header))

    def test_too_short(self):
        """Test header shorter than 15 bytes."""
        self.assertIsNone(parse_custom_header(bytes([0xAA] * 14)))


if __name__ == '__main__':
    unittest.main()
