"""Tests for table rows."""

import gc

import pytest

from sheetrecords.errors import FieldNotFoundError, StaleRowError
from sheetrecords.sheets import GridRange, InMemoryGridStore, Plane
from sheetrecords.table import FieldPlane, Table


class TestFieldPlane:
    """Test the per-cell record."""

    def test_defaults_are_empty_strings(self):
        """Test that unset attributes are empty strings."""
        field = FieldPlane()

        assert (field.value, field.note, field.background, field.font_color, field.formula) == (
            "",
            "",
            "",
            "",
            "",
        )

    def test_none_is_normalized(self):
        """Test that None becomes an empty string."""
        field = FieldPlane(value=None, note=None)

        assert field.value == ""
        assert field.note == ""

    def test_formula_wins_on_write(self):
        """Test which value is written back."""
        assert FieldPlane(value=3, formula="=1+2").write_value == "=1+2"
        assert FieldPlane(value=3).write_value == 3


class TestItemAccessors:
    """Test field accessors."""

    def test_value_accessors(self, table):
        """Test reading and writing values."""
        bo = table.items[1]
        bo.set_field_value("team", "green")

        assert bo.get_field_value("team") == "green"
        assert bo["team"] == "green"

        bo["team"] = "red"
        assert bo.get_field_value("team") == "red"

    def test_set_value_clears_formula(self, table):
        """Test that a literal value replaces a formula."""
        item = table.items[0]
        item.set_field_formula("team", "=A1")
        item.set_field_value("team", "blue")

        assert item.get_field_formula("team") == ""
        assert item.get_field_value("team") == "blue"

    def test_plane_accessors(self, table):
        """Test notes, colors and formulas."""
        item = table.items[2]
        item.set_field_note("name", "new hire")
        item.set_field_background("name", "#cccccc")
        item.set_field_font_color("name", "#000000")
        item.set_field_formula("name", '=CONCAT("C","y")')

        assert item.get_field_note("name") == "new hire"
        assert item.get_field_background("name") == "#cccccc"
        assert item.get_field_font_color("name") == "#000000"
        assert item.get_field_formula("name") == '=CONCAT("C","y")'
        assert item.get_field_value("name") == "Cy"

    def test_unknown_field_names_region(self, table):
        """Test the error raised for a mistyped field."""
        item = table.items[0]

        with pytest.raises(FieldNotFoundError) as exc_info:
            item.get_field_value("nmae")

        assert exc_info.value.field == "nmae"
        assert "'People'!A1:D4" in str(exc_info.value)

    @pytest.mark.parametrize(
        "setter",
        [
            "set_field_value",
            "set_field_note",
            "set_field_background",
            "set_field_formula",
            "set_field_font_color",
        ],
    )
    def test_unknown_field_on_setters(self, table, setter):
        """Test that every setter rejects unknown fields."""
        with pytest.raises(FieldNotFoundError):
            getattr(table.items[0], setter)("email", "x")

    def test_record_helpers(self, table):
        """Test dict-like helpers."""
        item = table.items[1]

        assert "name" in item
        assert "email" not in item
        assert item.to_record()["name"] == "Bo"

    def test_row_number(self, table):
        """Test the sheet row derived from the position."""
        assert [item.row_number for item in table.items] == [2, 3, 4]

    def test_table_reference_is_weak(self, store):
        """Test that rows do not keep their table alive."""
        table = Table.from_sheet(store, "People")
        item = table.items[0]
        del table
        gc.collect()

        with pytest.raises(ReferenceError):
            item.table


class TestItemCommit:
    """Test single-row write-back."""

    def test_commit_writes_all_planes_of_row(self, table, store):
        """Test a full row commit."""
        bo = table.items[1]
        bo["name"] = "Bob"
        bo.set_field_note("name", "renamed")
        store.writes.clear()
        bo.commit()

        line = GridRange(sheet_name="People", row=3, col=1, num_rows=1, num_cols=4)
        assert store.writes == [
            (Plane.VALUES, line),
            (Plane.NOTES, line),
            (Plane.BACKGROUNDS, line),
            (Plane.WRAPS, line),
            (Plane.FONT_COLORS, line),
        ]
        assert store.get_cell("People", 3, 2)["value"] == "Bob"
        assert store.get_cell("People", 3, 2)["note"] == "renamed"
        assert store.get_cell("People", 2, 2)["value"] == "Ana"

    def test_commit_values(self, table, store):
        """Test a values-only row commit."""
        item = table.items[0]
        item["team"] = "blue"
        store.writes.clear()
        item.commit_values()

        assert [plane for plane, _ in store.writes] == [Plane.VALUES]
        assert store.get_cell("People", 2, 3)["value"] == "blue"

    def test_commit_backgrounds_only(self, table, store):
        """Test a backgrounds-only row commit."""
        item = table.items[1]
        item.set_field_background("id", "#123456")
        item["name"] = "not written"
        store.writes.clear()
        item.commit_backgrounds_only()

        assert [plane for plane, _ in store.writes] == [Plane.BACKGROUNDS]
        assert store.get_cell("People", 3, 1)["background"] == "#123456"
        assert store.get_cell("People", 3, 2)["value"] == "Bo"

    def test_commit_field(self, table, store):
        """Test committing every plane of one cell."""
        item = table.items[2]
        item["team"] = "blue"
        item.set_field_note("team", "moved")
        store.writes.clear()
        item.commit_field("team")

        cell = GridRange(sheet_name="People", row=4, col=3, num_rows=1, num_cols=1)
        assert len(store.writes) == 5
        assert all(region == cell for _, region in store.writes)
        assert store.get_cell("People", 4, 3)["note"] == "moved"

    def test_commit_field_value_uses_formula(self, table, store):
        """Test that a single-cell value commit writes the formula."""
        item = table.items[0]
        item.set_field_formula("id", "=ROW()-1")
        item.commit_field_value("id")

        assert store.get_cell("People", 2, 1)["formula"] == "=ROW()-1"
        assert store.get_cell("People", 2, 2)["value"] == "Ana"

    def test_commit_added_row(self, table, store):
        """Test that a freshly added row can commit itself."""
        item = table.add({"id": 4, "name": "Di"})
        item.commit()

        assert store.get_cell("People", 5, 2)["value"] == "Di"

    @pytest.mark.parametrize(
        "method, args",
        [
            ("commit", ()),
            ("commit_values", ()),
            ("commit_backgrounds_only", ()),
            ("commit_field", ("name",)),
            ("commit_field_value", ("name",)),
        ],
    )
    def test_stale_rows_refuse_to_commit(self, table, store, method, args):
        """Test that every row commit checks authorization first."""
        table.sort_by("name", ascending=False)
        store.writes.clear()

        with pytest.raises(StaleRowError):
            getattr(table.items[0], method)(*args)
        assert store.writes == []

    def test_deleted_row_refuses_to_commit(self, table):
        """Test that deleted rows are stale."""
        bo = table.items[1]
        table.delete_one(bo)

        with pytest.raises(StaleRowError):
            bo.commit()

    def test_shifted_row_refuses_to_commit(self):
        """Test that a row moved up by a delete cannot overwrite its predecessor's line."""
        store = InMemoryGridStore({"S": [["k"], ["A"], ["B"], ["C"]]})
        table = Table.from_sheet(store, "S")
        a, b, c = table.items
        table.delete_one(a)
        store.writes.clear()

        for item in (b, c):
            with pytest.raises(StaleRowError):
                item.commit()
        assert store.writes == []
        assert store.sheet_values("S") == [["k"], ["A"], ["B"], ["C"]]

        table.commit()
        b.commit()
        assert store.sheet_values("S") == [["k"], ["B"], ["C"]]

    def test_wrap_plane_follows_settings(self, table, store, monkeypatch):
        """Test the wrap state written on commit."""
        from sheetrecords.config import settings

        monkeypatch.setattr(settings, "commit_wrap", True)
        table.items[0].commit()

        assert store.get_cell("People", 2, 1)["wrap"] is True

    def test_row_in_store_without_planes(self):
        """Test a table whose store has only values."""
        store = InMemoryGridStore({"S": [["a", "b"], ["x", "y"]]})
        table = Table.from_sheet(store, "S")
        table.items[0]["b"] = "z"
        table.items[0].commit_values()

        assert store.sheet_values("S") == [["a", "b"], ["x", "z"]]
