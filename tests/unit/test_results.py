"""Tests for result records and their JSON documents."""

import re
from datetime import datetime

from precompile_check.results import (
    InvocationResult,
    RawInvocationReport,
    utc_timestamp,
)

ADDRESS = bytes.fromhex("0000000000000000000000000000000000000002")


class TestTimestamp:
    def test_rfc3339_utc(self):
        stamp = utc_timestamp()
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", stamp)
        datetime.strptime(stamp, "%Y-%m-%dT%H:%M:%SZ")

    def test_report_uses_z_suffix(self):
        doc = RawInvocationReport(precompile="0x02", network="devnet", rpc_url="http://x").to_json()
        assert doc["timestamp"].endswith("Z")
        assert "+00:00" not in doc["timestamp"]


class TestInvocationResult:
    def test_failed_call_never_matches(self):
        result = InvocationResult(
            input=b"",
            expected_hash=bytes(32),
            returned_hash=bytes(32),
            contract_address=ADDRESS,
            call_success=False,
            error="execution reverted",
        )
        assert not result.match
        assert result.to_json()["error"] == "execution reverted"

    def test_missing_return_is_empty_string(self):
        result = InvocationResult(
            input=b"x",
            expected_hash=bytes(32),
            returned_hash=None,
            contract_address=ADDRESS,
            call_success=False,
        )
        assert result.to_json()["returnedHash"] == ""


class TestRawInvocationReport:
    def test_empty_report_is_not_success(self):
        report = RawInvocationReport(precompile="0x02", network="devnet", rpc_url="http://x")
        assert not report.success
        assert "error" not in report.to_json()
