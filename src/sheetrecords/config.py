"""Configuration management for SheetRecords."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_bool(name: str, default: str = "false") -> bool:
    """Parse a boolean flag from an environment variable."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings(BaseModel):
    """Application settings."""

    # Google Sheets API credentials
    google_credentials_path: Path = Path(os.getenv("GOOGLE_CREDENTIALS_PATH", "credentials.json"))
    google_token_path: Path = Path(os.getenv("GOOGLE_TOKEN_PATH", "token.json"))

    # Spreadsheet used by the CLI when --spreadsheet is not given
    spreadsheet_id: Optional[str] = os.getenv("SPREADSHEET_ID")

    # Table layout
    header_row: int = int(os.getenv("HEADER_ROW", "1"))  # 1-based row holding the field labels

    # Write-back behaviour
    value_input_option: str = os.getenv("VALUE_INPUT_OPTION", "USER_ENTERED")  # or RAW
    commit_wrap: bool = _parse_bool("COMMIT_WRAP")  # wrap state written for every committed cell

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    debug: bool = _parse_bool("DEBUG")


settings = Settings()
