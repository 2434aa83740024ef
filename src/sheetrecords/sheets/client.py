"""Google Sheets API client implementing the grid store interface."""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..config import settings
from ..errors import SheetNotFoundError, StoreError
from .models import BlockData, GridRange, Plane
from .store import GridStore, check_shape

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Day zero of spreadsheet serial dates
SERIAL_EPOCH = datetime(1899, 12, 30)

_GRID_FIELDS = (
    "sheets(data(rowData(values("
    "userEnteredValue,effectiveValue,formattedValue,note,"
    "effectiveFormat(backgroundColor,numberFormat,textFormat(foregroundColor))"
    "))))"
)

_PLANE_FIELD_MASKS = {
    Plane.NOTES: "note",
    Plane.BACKGROUNDS: "userEnteredFormat.backgroundColor",
    Plane.WRAPS: "userEnteredFormat.wrapStrategy",
    Plane.FONT_COLORS: "userEnteredFormat.textFormat.foregroundColor",
}


def color_to_hex(color: Optional[dict]) -> str:
    """Convert a Sheets API color ({red, green, blue} floats) to ``#rrggbb``."""
    if not color:
        return ""
    channels = [round(color.get(name, 0.0) * 255) for name in ("red", "green", "blue")]
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def hex_to_color(value: str) -> Optional[dict]:
    """Convert ``#rrggbb`` (or ``#rgb``) to a Sheets API color. Empty means no color."""
    value = (value or "").strip().lstrip("#")
    if not value:
        return None
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid color: #{value}")
    red, green, blue = (int(value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def serial_to_datetime(serial: float) -> datetime:
    """Convert a spreadsheet serial number to a datetime."""
    return SERIAL_EPOCH + timedelta(days=serial)


def to_user_entered(value: Any) -> Any:
    """Convert a Python value to what the values API accepts."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return value


def _cell_value(cell: dict) -> Any:
    """Extract the effective value of a CellData resource."""
    effective = cell.get("effectiveValue")
    if not effective:
        return ""
    if "numberValue" in effective:
        number = effective["numberValue"]
        number_type = cell.get("effectiveFormat", {}).get("numberFormat", {}).get("type")
        if number_type in ("DATE", "DATE_TIME"):
            return serial_to_datetime(number)
        return number
    if "stringValue" in effective:
        return effective["stringValue"]
    if "boolValue" in effective:
        return effective["boolValue"]
    if "errorValue" in effective:
        return cell.get("formattedValue", "#ERROR!")
    return ""


class GoogleSheetsClient(GridStore):
    """Client for reading and writing cell grids of one spreadsheet."""

    def __init__(self, spreadsheet_id: Optional[str] = None, service=None):
        self.spreadsheet_id = spreadsheet_id or settings.spreadsheet_id
        self._service = service
        self._credentials = None
        self._sheet_ids: Optional[dict[str, int]] = None

    def _get_credentials(self) -> Credentials:
        """Get or refresh OAuth2 credentials."""
        creds = None

        if settings.google_token_path.exists():
            creds = Credentials.from_authorized_user_file(str(settings.google_token_path), SCOPES)

        if not creds or not creds.valid:
            if creds and creds.expired and creds.refresh_token:
                creds.refresh(Request())
            else:
                if not settings.google_credentials_path.exists():
                    raise FileNotFoundError(
                        f"Google credentials file not found at {settings.google_credentials_path}. "
                        "Please download it from Google Cloud Console."
                    )
                flow = InstalledAppFlow.from_client_secrets_file(
                    str(settings.google_credentials_path), SCOPES
                )
                creds = flow.run_local_server(port=0)

            # Save credentials for next run
            settings.google_token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(settings.google_token_path, "w") as token:
                token.write(creds.to_json())

        return creds

    @property
    def service(self):
        """Get or create the Sheets API service."""
        if self._service is None:
            self._credentials = self._get_credentials()
            self._service = build("sheets", "v4", credentials=self._credentials)
        return self._service

    def _require_spreadsheet(self) -> str:
        if not self.spreadsheet_id:
            raise ValueError("No spreadsheet ID configured (set SPREADSHEET_ID or pass one)")
        return self.spreadsheet_id

    def get_spreadsheet_info(self) -> dict:
        """Get basic information about the spreadsheet and its sheets."""
        try:
            result = (
                self.service.spreadsheets()
                .get(spreadsheetId=self._require_spreadsheet())
                .execute()
            )
        except HttpError as e:
            raise StoreError(f"Failed to get spreadsheet info: {e}") from e

        info = {
            "id": result["spreadsheetId"],
            "title": result["properties"]["title"],
            "sheets": [
                {
                    "id": sheet["properties"]["sheetId"],
                    "title": sheet["properties"]["title"],
                    "row_count": sheet["properties"]["gridProperties"]["rowCount"],
                    "col_count": sheet["properties"]["gridProperties"]["columnCount"],
                }
                for sheet in result.get("sheets", [])
            ],
            "named_ranges": result.get("namedRanges", []),
        }
        self._sheet_ids = {sheet["title"]: sheet["id"] for sheet in info["sheets"]}
        return info

    def _sheet_id(self, sheet_name: str) -> int:
        if self._sheet_ids is None or sheet_name not in self._sheet_ids:
            self.get_spreadsheet_info()
        try:
            return self._sheet_ids[sheet_name]
        except KeyError:
            raise SheetNotFoundError(sheet_name) from None

    def _api_range(self, region: GridRange) -> dict:
        """Convert a region to a 0-based, end-exclusive API GridRange."""
        return {
            "sheetId": self._sheet_id(region.sheet_name),
            "startRowIndex": region.row - 1,
            "endRowIndex": region.last_row,
            "startColumnIndex": region.col - 1,
            "endColumnIndex": region.last_col,
        }

    def _batch_update(self, requests: list[dict]):
        try:
            return (
                self.service.spreadsheets()
                .batchUpdate(spreadsheetId=self._require_spreadsheet(), body={"requests": requests})
                .execute()
            )
        except HttpError as e:
            raise StoreError(f"Batch update failed: {e}") from e

    # GridStore implementation

    def read_block(self, region: GridRange) -> BlockData:
        """Read every plane of a region in a single request."""
        logger.debug(f"Reading block {region}")
        try:
            result = (
                self.service.spreadsheets()
                .get(
                    spreadsheetId=self._require_spreadsheet(),
                    ranges=[region.a1_notation],
                    includeGridData=True,
                    fields=_GRID_FIELDS,
                )
                .execute()
            )
        except HttpError as e:
            raise StoreError(f"Failed to read range {region}: {e}") from e

        sheets = result.get("sheets", [])
        data = sheets[0].get("data", [{}]) if sheets else [{}]
        row_data = data[0].get("rowData", []) if data else []

        block = BlockData()
        for row_idx in range(region.num_rows):
            cells = row_data[row_idx].get("values", []) if row_idx < len(row_data) else []
            cells = cells + [{}] * (region.num_cols - len(cells))
            cells = cells[: region.num_cols]

            block.values.append([_cell_value(cell) for cell in cells])
            block.notes.append([cell.get("note", "") for cell in cells])
            block.formulas.append(
                [cell.get("userEnteredValue", {}).get("formulaValue", "") for cell in cells]
            )
            block.backgrounds.append(
                [color_to_hex(cell.get("effectiveFormat", {}).get("backgroundColor")) for cell in cells]
            )
            block.font_colors.append(
                [
                    color_to_hex(
                        cell.get("effectiveFormat", {}).get("textFormat", {}).get("foregroundColor")
                    )
                    for cell in cells
                ]
            )

        return block

    def read_values(self, region: GridRange) -> list[list[Any]]:
        """Read unformatted values of a region, padded to its extent."""
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .get(
                    spreadsheetId=self._require_spreadsheet(),
                    range=region.a1_notation,
                    valueRenderOption="UNFORMATTED_VALUE",
                )
                .execute()
            )
        except HttpError as e:
            raise StoreError(f"Failed to read values of {region}: {e}") from e

        values = result.get("values", [])
        padded = []
        for row_idx in range(region.num_rows):
            line = list(values[row_idx]) if row_idx < len(values) else []
            padded.append((line + [""] * region.num_cols)[: region.num_cols])
        return padded

    def write_block(self, region: GridRange, plane: Plane, data: list[list[Any]]) -> None:
        check_shape(region, data)
        logger.debug(f"Writing {plane.value} to {region}")

        if plane == Plane.VALUES:
            body = {"values": [[to_user_entered(value) for value in line] for line in data]}
            try:
                (
                    self.service.spreadsheets()
                    .values()
                    .update(
                        spreadsheetId=self._require_spreadsheet(),
                        range=region.a1_notation,
                        valueInputOption=settings.value_input_option,
                        body=body,
                    )
                    .execute()
                )
            except HttpError as e:
                raise StoreError(f"Failed to write values to {region}: {e}") from e
            return

        rows = [{"values": [self._format_cell(plane, value) for value in line]} for line in data]
        self._batch_update(
            [
                {
                    "updateCells": {
                        "range": self._api_range(region),
                        "rows": rows,
                        "fields": _PLANE_FIELD_MASKS[plane],
                    }
                }
            ]
        )

    @staticmethod
    def _format_cell(plane: Plane, value: Any) -> dict:
        if plane == Plane.NOTES:
            return {"note": value or ""}
        if plane == Plane.WRAPS:
            return {"userEnteredFormat": {"wrapStrategy": "WRAP" if value else "OVERFLOW_CELL"}}

        color = hex_to_color(value)
        if plane == Plane.BACKGROUNDS:
            return {"userEnteredFormat": {"backgroundColor": color}} if color else {}
        return {"userEnteredFormat": {"textFormat": {"foregroundColor": color}}} if color else {}

    def clear_region(self, region: GridRange, contents_only: bool = False) -> None:
        logger.debug(f"Clearing {region} (contents_only={contents_only})")
        if contents_only:
            try:
                (
                    self.service.spreadsheets()
                    .values()
                    .clear(spreadsheetId=self._require_spreadsheet(), range=region.a1_notation, body={})
                    .execute()
                )
            except HttpError as e:
                raise StoreError(f"Failed to clear {region}: {e}") from e
            return

        self._batch_update(
            [
                {
                    "updateCells": {
                        "range": self._api_range(region),
                        "fields": "userEnteredValue,userEnteredFormat,note",
                    }
                }
            ]
        )

    def resolve_named_range(self, name: str) -> Optional[GridRange]:
        info = self.get_spreadsheet_info()
        sheets_by_id = {sheet["id"]: sheet for sheet in info["sheets"]}

        for named in info["named_ranges"]:
            if named.get("name") != name:
                continue
            api_range = named.get("range", {})
            sheet = sheets_by_id.get(api_range.get("sheetId", 0))
            if sheet is None:
                logger.warning(f"Named range '{name}' points to an unknown sheet")
                return None
            start_row = api_range.get("startRowIndex", 0)
            end_row = api_range.get("endRowIndex", sheet["row_count"])
            start_col = api_range.get("startColumnIndex", 0)
            end_col = api_range.get("endColumnIndex", sheet["col_count"])
            return GridRange(
                sheet_name=sheet["title"],
                row=start_row + 1,
                col=start_col + 1,
                num_rows=max(end_row - start_row, 1),
                num_cols=max(end_col - start_col, 1),
            )
        return None

    def full_region(self, sheet_name: str, header_row: int = 1) -> GridRange:
        self._sheet_id(sheet_name)
        escaped = sheet_name.replace("'", "''")
        try:
            result = (
                self.service.spreadsheets()
                .values()
                .get(spreadsheetId=self._require_spreadsheet(), range=f"'{escaped}'")
                .execute()
            )
        except HttpError as e:
            raise StoreError(f"Failed to read sheet '{sheet_name}': {e}") from e

        values = result.get("values", [])
        last_row = len(values)
        last_col = max((len(line) for line in values), default=1)
        logger.info(
            f"Sheet '{sheet_name}' populated extent: {last_row}x{last_col}"
        )
        return GridRange(
            sheet_name=sheet_name,
            row=header_row,
            col=1,
            num_rows=max(last_row, header_row) - header_row + 1,
            num_cols=max(last_col, 1),
        )
