"""Tests for utility modules."""

from datetime import datetime, timezone

import pytest

from proxmox_mobile.client.models import Node, Storage
from proxmox_mobile.utils.datetime import format_timestamp, format_uptime, parse_epoch
from proxmox_mobile.utils.formatters import (
    format_bytes,
    format_cpu,
    format_percentage,
    get_status_color,
    output_data,
    to_plain,
)


class TestFormatBytes:
    """Tests for format_bytes."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "N/A"),
            (0, "0 B"),
            (512, "512 B"),
            (1536, "1.50 KiB"),
            (17179869184, "16.00 GiB"),
        ],
    )
    def test_values(self, value, expected):
        assert format_bytes(value) == expected


class TestPercentages:
    """Tests for percentage and CPU formatting."""

    def test_format_percentage(self):
        assert format_percentage(1, 4) == "25.0%"
        assert format_percentage(1, 0) == "N/A"
        assert format_percentage(None, 4) == "N/A"

    def test_format_cpu(self):
        assert format_cpu(0.0421) == "4.2%"
        assert format_cpu(None) == "N/A"


class TestStatusColor:
    """Tests for status colors."""

    @pytest.mark.parametrize(
        "status,color",
        [
            ("running", "green"),
            ("online", "green"),
            ("suspended", "yellow"),
            ("stopped", "red"),
            ("offline", "red"),
            ("migrating", "blue"),
        ],
    )
    def test_colors(self, status, color):
        assert get_status_color(status) == color


class TestDatetime:
    """Tests for epoch and uptime helpers."""

    def test_parse_epoch(self):
        assert parse_epoch(1705315200) == datetime(2024, 1, 15, 10, 40, tzinfo=timezone.utc)
        assert parse_epoch("1705315200") == datetime(2024, 1, 15, 10, 40, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, True, "soon"])
    def test_parse_epoch_invalid(self, value):
        assert parse_epoch(value) is None

    def test_format_timestamp(self):
        assert format_timestamp(1705315200) == "2024-01-15 10:40:00 UTC"
        assert format_timestamp(None) == "N/A"

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (918, "15m 18s"),
            (3665, "1h 1m"),
            (90061, "1d 1h 1m"),
            (None, "N/A"),
            (-1, "N/A"),
        ],
    )
    def test_format_uptime(self, seconds, expected):
        assert format_uptime(seconds) == expected


class TestOutput:
    """Tests for output_data."""

    def test_to_plain_drops_unset_fields(self):
        plain = to_plain([Node(node="pve", status="online")])

        assert plain == [{"node": "pve", "status": "online"}]

    def test_json_output(self, capsys):
        output_data([Node(node="pve", status="online")], "json")

        out = capsys.readouterr().out
        assert '"node": "pve"' in out

    def test_yaml_output(self, capsys):
        output_data(Storage(storage="local", content="iso,backup"), "yaml")

        out = capsys.readouterr().out
        assert "storage: local" in out
        assert "- iso" in out

    def test_plain_output(self, capsys):
        columns = [{"key": "node", "header": "Node"}, {"key": "status", "header": "Status"}]

        output_data([Node(node="pve", status="online"), Node(node="pve2")], "plain", table_columns=columns)

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["node\tstatus", "pve\tonline", "pve2\t"]

    def test_table_output(self, capsys):
        columns = [{"key": "node", "header": "Node"}, {"key": "maxmem", "header": "Memory", "format": "bytes"}]

        output_data([Node(node="pve", maxmem=17179869184)], "table", table_columns=columns, title="Nodes")

        out = capsys.readouterr().out
        assert "pve" in out
        assert "16.00 GiB" in out
