#!/usr/bin/env python3
"""
Unit tests for CSV export functionality.

Tests the UsersCSVExporter with mock data to ensure correct CSV generation.
"""

import csv
import io
import tempfile
from pathlib import Path

import pytest

from user_admin.clients.base import FetchError
from user_admin.export.csv_exporter import UsersCSVExporter, escape_field
from user_admin.models.user import User, parse_users

HEADER_LINE = "ID;First;Last;Email;Phone;Location;Hobby"


def parse_csv(content: str) -> list[list[str]]:
    """Read exported text back with a standard parser."""
    assert content.startswith("\ufeff")
    return list(csv.reader(io.StringIO(content[1:], newline=""), delimiter=";"))


def make_user(**overrides) -> User:
    data = {
        "id": 1,
        "first": "Ann",
        "last": "Lee",
        "email": "ann@example.com",
        "phone": "555-0100",
        "location": "Berlin",
        "hobby": "Chess",
    }
    data.update(overrides)
    return User(**data)


class TestEscapeField:
    """Field-level quoting rules."""

    @pytest.mark.parametrize("value", ["Berlin", "", "ann@example.com", "555-0100", "a'b"])
    def test_plain_values_unquoted(self, value):
        assert escape_field(value) == value

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("a;b", '"a;b"'),
            ("NYC, NY", '"NYC, NY"'),
            ("line1\nline2", '"line1\nline2"'),
            ("carriage\rreturn", '"carriage\rreturn"'),
            ('Say "hi"', '"Say ""hi"""'),
            ('"', '""""'),
        ],
    )
    def test_special_characters_quoted(self, value, expected):
        assert escape_field(value) == expected

    def test_custom_delimiter_triggers_quoting(self):
        assert escape_field("a|b", delimiter="|") == '"a|b"'
        assert escape_field("a;b", delimiter="|") == "a;b"

    def test_non_string_values(self):
        assert escape_field(7) == "7"
        assert escape_field(None) == ""


class TestCSVExporter:
    """Test suite for CSV export functionality."""

    @pytest.fixture
    def temp_dir(self):
        """Create temporary directory for test outputs."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def exporter(self):
        return UsersCSVExporter(filename="users.csv")

    @pytest.fixture
    def users(self, sample_users):
        return parse_users(sample_users)

    def test_header_row(self, exporter):
        content = exporter.render([make_user()])
        assert content[1:].split("\n")[0] == HEADER_LINE

    def test_bom_is_first_character(self, exporter, users):
        content = exporter.render(users)
        assert content[0] == "\ufeff"
        assert exporter.build(users).as_bytes()[:3] == b"\xef\xbb\xbf"

    def test_empty_export_is_header_only(self, exporter):
        content = exporter.render([])
        assert content == "\ufeff" + HEADER_LINE

    def test_rows_joined_with_line_feed_without_trailing_newline(self, exporter, users):
        content = exporter.render(users)
        assert "\r\n" not in content
        assert not content.endswith("\n")
        assert content.count("\n") == len(users)

    def test_example_record(self, exporter, users):
        content = exporter.render(users)
        lines = content[1:].split("\n")
        assert lines[2] == '7;Jo;Ann;j@x.com;;"NYC, NY";"Say ""hi"""'

    def test_falsy_optional_fields_are_empty(self, exporter, users):
        rows = parse_csv(exporter.render(users))
        assert rows[3] == ["9", "Max", "Power", "max@example.com", "", "", ""]

    def test_server_order_is_kept(self, exporter):
        users = [make_user(id=5), make_user(id=2), make_user(id=9)]
        rows = parse_csv(exporter.render(users))
        assert [row[0] for row in rows[1:]] == ["5", "2", "9"]

    @pytest.mark.parametrize(
        "value",
        [
            "Chess; Go",
            "Cooking, baking",
            'The "best" hobby',
            "multi\nline",
            "cr\rinside",
            'all of ; , " \n at once',
        ],
    )
    def test_round_trip_through_csv_reader(self, exporter, value):
        user = make_user(phone=value, location=value, hobby=value)
        rows = parse_csv(exporter.render([user]))

        assert len(rows) == 2
        assert rows[1][4:] == [value, value, value]

    def test_build_metadata(self, exporter, users):
        result = exporter.build(users)

        assert result.filename == "users.csv"
        assert result.media_type == "text/csv;charset=utf-8;"
        assert result.row_count == 3
        assert result.content_disposition == 'attachment; filename="users.csv"'

    def test_write_creates_file(self, exporter, users, temp_dir):
        result = exporter.build(users)
        csv_path = exporter.write(result, temp_dir / "out")

        assert csv_path.exists()
        assert csv_path.name == "users.csv"

        with open(csv_path, "rb") as f:
            assert f.read() == result.as_bytes()

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f, delimiter=";")
            rows = list(reader)
            assert reader.fieldnames == HEADER_LINE.split(";")
            assert rows[1]["Location"] == "NYC, NY"
            assert rows[1]["Hobby"] == 'Say "hi"'

    @pytest.mark.asyncio
    async def test_export_fetches_all_users_without_search(self, exporter, user_client, backend):
        async with user_client:
            result = await exporter.export(user_client)

        assert result.row_count == 3
        gets = backend.requests_for("GET")
        assert len(gets) == 1
        assert "search" not in gets[0].url.params

    @pytest.mark.asyncio
    async def test_export_propagates_fetch_error(self, exporter, user_client, backend):
        backend.fail_with = 500

        with pytest.raises(FetchError):
            async with user_client:
                await exporter.export(user_client)


if __name__ == "__main__":
    # Run tests with pytest
    pytest.main([__file__, "-v"])
