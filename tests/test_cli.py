"""Tests for the command-line interface."""

import argparse
import json

import pytest

from sheetrecords import cli
from sheetrecords.errors import FieldNotFoundError


class TestParseWhere:
    """Test parsing of --where conditions."""

    def test_text_condition(self):
        """Test a plain text value."""
        assert cli._parse_where(["team=red"]) == [{"team": "red"}]

    def test_numeric_condition(self):
        """Test a numeric value matching text or number cells."""
        assert cli._parse_where(["id = 3"]) == [[{"id": " 3"}, {"id": 3.0}]]

    def test_value_with_equals_sign(self):
        """Test that only the first '=' separates field and value."""
        assert cli._parse_where(["formula==A1"]) == [{"formula": "=A1"}]

    def test_missing_separator(self):
        """Test a malformed condition."""
        with pytest.raises(argparse.ArgumentTypeError):
            cli._parse_where(["team"])


class TestRunShow:
    """Test the show command."""

    def test_prints_rows_as_json(self, store, capsys):
        """Test printing every row."""
        cli.run_show(None, "People", store=store)

        rows = json.loads(capsys.readouterr().out)
        assert [row["name"] for row in rows] == ["Ana", "Bo", "Cy"]
        assert rows[0]["joined"] == "2023-01-05"

    def test_filter_sort_and_limit(self, store, capsys):
        """Test combining filters, sorting and a limit."""
        cli.run_show(
            None,
            "People",
            where=cli._parse_where(["team=red"]),
            sort="name",
            descending=True,
            limit=1,
            store=store,
        )

        rows = json.loads(capsys.readouterr().out)
        assert [row["name"] for row in rows] == ["Cy"]

    def test_numeric_filter(self, store, capsys):
        """Test a numeric filter against numeric cells."""
        cli.run_show(None, "People", where=cli._parse_where(["id=2"]), store=store)

        rows = json.loads(capsys.readouterr().out)
        assert [row["name"] for row in rows] == ["Bo"]

    def test_unknown_filter_field(self, store):
        """Test that filter fields are checked."""
        with pytest.raises(FieldNotFoundError):
            cli.run_show(None, "People", where=[{"email": "x"}], store=store)

    def test_show_does_not_write(self, store, capsys):
        """Test that show leaves the sheet untouched."""
        cli.run_show(None, "People", sort="name", store=store)

        assert store.writes == []
        assert store.clears == []


class TestRunLookup:
    """Test the lookup command."""

    def test_prints_value(self, store, capsys):
        """Test a key that exists."""
        cli.run_lookup(None, "People", "name", "Bo", "team", store=store)

        assert capsys.readouterr().out.strip() == "blue"

    def test_missing_key_exits(self, store, capsys):
        """Test a key that does not exist."""
        with pytest.raises(SystemExit) as exc_info:
            cli.run_lookup(None, "People", "name", "Zed", "team", store=store)

        assert exc_info.value.code == 1
        assert "Zed" in capsys.readouterr().err

    def test_text_key_on_sorted_numeric_column(self, store, capsys):
        """Test that a sorted lookup without --number reports a missing key."""
        with pytest.raises(SystemExit) as exc_info:
            cli.run_lookup(None, "People", "id", "2", "name", assume_sorted=True, store=store)

        assert exc_info.value.code == 1
        assert "No row with id" in capsys.readouterr().err

    def test_numeric_key_on_sorted_column(self, store, capsys):
        """Test a binary search with a numeric key."""
        cli.run_lookup(None, "People", "id", 3, "name", assume_sorted=True, store=store)

        assert capsys.readouterr().out.strip() == "Cy"


class TestMain:
    """Test argument handling of the entry point."""

    def test_no_command(self, capsys):
        """Test that help is printed without a command."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])

        assert exc_info.value.code == 1
        assert "usage" in capsys.readouterr().out

    def test_bad_where(self, capsys):
        """Test a malformed filter exits with an error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "People", "-w", "team"])

        assert exc_info.value.code == 1
        assert "Expected field=value" in capsys.readouterr().err

    def test_library_errors_are_reported(self, monkeypatch, capsys):
        """Test that library errors exit with a message."""

        def fail(*args, **kwargs):
            raise FieldNotFoundError("email", "'People'!A1:D4")

        monkeypatch.setattr(cli, "run_show", fail)

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "People"])

        assert exc_info.value.code == 1
        assert "email" in capsys.readouterr().err

    def test_lookup_number_key(self, monkeypatch):
        """Test that --number turns the key into a number."""
        calls = []
        monkeypatch.setattr(cli, "run_lookup", lambda *args, **kwargs: calls.append((args, kwargs)))

        cli.main(["lookup", "People", "id", "2", "name", "--number", "--sorted"])
        cli.main(["lookup", "People", "id", "2.5", "name", "--number"])
        cli.main(["lookup", "People", "id", "2", "name"])

        assert [args[3] for args, _ in calls] == [2, 2.5, "2"]
        assert calls[0][1]["assume_sorted"] is True

    def test_lookup_bad_number_key(self, capsys):
        """Test a non-numeric key with --number."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["lookup", "People", "id", "two", "name", "--number"])

        assert exc_info.value.code == 1
        assert "Expected a number" in capsys.readouterr().err

    def test_show_arguments(self, monkeypatch):
        """Test that options reach run_show."""
        calls = []
        monkeypatch.setattr(cli, "run_show", lambda *args, **kwargs: calls.append((args, kwargs)))

        cli.main(["-s", "abc", "show", "People", "--sort", "name", "--desc", "--limit", "2"])

        args, kwargs = calls[0]
        assert args == ("abc", "People")
        assert kwargs["sort"] == "name"
        assert kwargs["descending"] is True
        assert kwargs["limit"] == 2
        assert kwargs["where"] == []
