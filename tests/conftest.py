"""Pytest configuration and shared fixtures."""

from datetime import date
from pathlib import Path
from unittest.mock import Mock

import pytest

from sheetrecords.config import Settings
from sheetrecords.sheets import GoogleSheetsClient, InMemoryGridStore
from sheetrecords.table import Table


PEOPLE_ROWS = [
    ["id", "name", "team", "joined"],
    [1, "Ana", "red", date(2023, 1, 5)],
    [2, "Bo", "blue", date(2022, 6, 1)],
    [3, "Cy", "red", date(2024, 3, 9)],
]


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create settings with test values."""
    creds_file = tmp_path / "credentials.json"
    token_file = tmp_path / "token.json"
    creds_file.write_text('{"installed": {"client_id": "test"}}')
    token_file.write_text('{"token": "test"}')

    return Settings(
        google_credentials_path=creds_file,
        google_token_path=token_file,
        spreadsheet_id="test-sheet-123",
        header_row=1,
        value_input_option="USER_ENTERED",
        commit_wrap=False,
    )


@pytest.fixture
def store() -> InMemoryGridStore:
    """In-memory store with a 'People' sheet: header plus three rows."""
    grid = InMemoryGridStore({"People": [list(line) for line in PEOPLE_ROWS]})
    grid.set_cell("People", 2, 2, note="team lead", background="#ff0000", font_color="#ffffff")
    grid.set_cell("People", 4, 3, background="#00ff00")
    return grid


@pytest.fixture
def table(store: InMemoryGridStore) -> Table:
    """Table over the whole 'People' sheet, without index."""
    return Table.from_sheet(store, "People")


@pytest.fixture
def indexed_table(store: InMemoryGridStore) -> Table:
    """Table over the 'People' sheet indexed by 'id'."""
    return Table.from_sheet(store, "People", index_field="id")


@pytest.fixture
def mock_service() -> Mock:
    """Mocked Sheets API v4 service resource."""
    service = Mock()
    spreadsheets = service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {
        "spreadsheetId": "test-sheet-123",
        "properties": {"title": "Test Sheet"},
        "sheets": [
            {
                "properties": {
                    "sheetId": 7,
                    "title": "People",
                    "gridProperties": {"rowCount": 1000, "columnCount": 26},
                }
            }
        ],
        "namedRanges": [
            {
                "namedRangeId": "nr1",
                "name": "Staff",
                "range": {
                    "sheetId": 7,
                    "startRowIndex": 0,
                    "endRowIndex": 4,
                    "startColumnIndex": 1,
                    "endColumnIndex": 3,
                },
            }
        ],
    }
    return service


@pytest.fixture
def google_client(mock_service: Mock) -> GoogleSheetsClient:
    """Google client bound to the mocked service."""
    return GoogleSheetsClient("test-sheet-123", service=mock_service)
