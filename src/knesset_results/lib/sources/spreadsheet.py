"""Legacy spreadsheet reader.

The oldest round has no API source; its per-ballot-box results come from a
spreadsheet export.  The first sheet is read with its header row as the
column names, producing the same row-dict shape as the API.
"""

from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from knesset_results.lib.sources.errors import MissingSourceError, SpreadsheetReadError


def read_legacy_spreadsheet(path: Path) -> list[dict[str, Any]]:
    """Read the first sheet of a spreadsheet into a list of row dicts.

    Empty cells become empty strings so downstream coercion treats them the
    same way as blank API cells.

    Args:
        path: Path to a ``.xls`` or ``.xlsx`` file.

    Returns:
        One dict per data row, keyed by header.

    Raises:
        MissingSourceError: If the file does not exist.
        SpreadsheetReadError: If the file cannot be parsed as a spreadsheet.
    """
    if not path.exists():
        msg = f"Legacy spreadsheet not found: {path}"
        raise MissingSourceError(msg)

    logger.info("Reading legacy spreadsheet {}", path)
    try:
        df = pd.read_excel(path, sheet_name=0, dtype=object)
    except Exception as exc:
        msg = f"Failed to read legacy spreadsheet {path}: {exc}"
        logger.error(msg)
        raise SpreadsheetReadError(msg) from exc

    df.columns = [str(c) for c in df.columns]
    df = df.astype(object).where(df.notna(), "")

    rows = df.to_dict(orient="records")
    logger.info("Read {} rows from {}", len(rows), path.name)
    return rows
