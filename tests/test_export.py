"""
Tests for response formatting and batch export.
"""

import json
import tempfile
import unittest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pandas as pd

from protocol_dissector.classifier import classify
from protocol_dissector.export import (
    COLUMNS,
    export_csv,
    export_json,
    format_result,
    results_to_dataframe,
    summarize,
)


class ExportTestBase(unittest.TestCase):
    """Base class with a small batch of classified messages."""

    def setUp(self):
        self.results = [
            classify(bytes.fromhex("000100000006010300000001")),
            classify(b"GET / HTTP/1.1\r\nHost: a\r\n\r\n"),
            classify(bytes([0xFF, 0xFB, 0x18])),
            classify(bytes([0xFF, 0xFD, 0x01])),
            classify(b"\x00\x00\x00"),
        ]
        self.sources = ["modbus.bin", "http.txt", "telnet1", "telnet2", "zeros"]


class TestDataFrame(ExportTestBase):
    """Test DataFrame construction."""

    def test_columns_and_rows(self):
        df = results_to_dataframe(self.results, self.sources)
        self.assertEqual(list(df.columns), COLUMNS)
        self.assertEqual(len(df), 5)
        self.assertEqual(df.loc[0, 'protocol'], "Modbus TCP")
        self.assertEqual(df.loc[0, 'data_length'], 12)
        self.assertEqual(df.loc[4, 'protocol'], "Unknown")
        self.assertEqual(df.loc[2, 'source'], "telnet1")
        fields = json.loads(df.loc[1, 'fields'])
        self.assertEqual(fields['host'], "a")

    def test_default_sources(self):
        df = results_to_dataframe(self.results)
        self.assertEqual(list(df['source']), ["0", "1", "2", "3", "4"])

    def test_source_count_mismatch(self):
        with self.assertRaises(ValueError):
            results_to_dataframe(self.results, ["only-one"])

    def test_empty(self):
        df = results_to_dataframe([])
        self.assertTrue(df.empty)
        self.assertEqual(list(df.columns), COLUMNS)

    def test_summarize(self):
        summary = summarize(self.results)
        counts = dict(zip(summary['protocol'], summary['messages']))
        self.assertEqual(counts, {"HTTP": 1, "Modbus TCP": 1, "Telnet": 2, "Unknown": 1})


class TestFileExport(ExportTestBase):
    """Test CSV and JSON export."""

    def test_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "results.csv"
            export_csv(self.results, str(path), self.sources)
            df = pd.read_csv(path, keep_default_na=False)
        self.assertEqual(len(df), 5)
        self.assertEqual(list(df['protocol']), ["Modbus TCP", "HTTP", "Telnet", "Telnet", "Unknown"])
        self.assertEqual(df.loc[2, 'raw_hex'], "FF FB 18")

    def test_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "results.json"
            export_json(self.results, str(path), self.sources)
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        self.assertEqual(len(data), 5)
        self.assertEqual(data[2]['fields']['commands'], ["IAC WILL Terminal-Type"])
        self.assertEqual(data[0]['source'], "modbus.bin")
        self.assertEqual(data[4]['protocol'], "Unknown")

    def test_json_source_count_mismatch(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "results.json"
            with self.assertRaises(ValueError):
                export_json(self.results, str(path), ["only-one"])
            self.assertFalse(path.exists())


class TestFormatting(ExportTestBase):
    """Test console rendering."""

    def test_format_result(self):
        text = format_result(self.results[0])
        lines = text.splitlines()
        self.assertEqual(lines[0], "Modbus TCP - Function Code 0x03 - Read Holding Registers")
        self.assertIn('   function_code = "0x03"', lines)
        self.assertIn('   register_count = 1', lines)
        self.assertEqual(len(lines), 1 + len(self.results[0].fields))


if __name__ == '__main__':
    unittest.main()
