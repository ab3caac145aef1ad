"""Google Sheets visualization (gviz) table adapter.

The gviz endpoint answers with a JavaScript callback wrapping a JSON object,
so the JSON is cut out between the first ``{`` and the last ``}`` before
parsing.
"""

import json
from typing import Any, Optional
from urllib.parse import quote

from pet_travel_kb.retrieval.service import HttpTableSource, SourceConfig, Row
from pet_travel_kb.core import get_logger
from pet_travel_kb.core.errors import ParseError

logger = get_logger(__name__)


class GvizTableSource(HttpTableSource):
    """Reads sheets of a published Google spreadsheet as tables."""

    API_BASE = "https://docs.google.com/spreadsheets/d"

    def __init__(self, config: Optional[SourceConfig] = None):
        """Initialize the gviz source."""
        super().__init__(config)
        if not self.config.spreadsheet_id:
            logger.warning("gviz_spreadsheet_id_missing")
        logger.info("gviz_source_initialized", spreadsheet_id=self.config.spreadsheet_id)

    @property
    def source_id(self) -> str:
        return "google_sheets_gviz"

    def get_table_url(self, table_name: str) -> str:
        """Build the gviz JSON URL for a sheet.

        Args:
            table_name: Sheet name within the spreadsheet

        Returns:
            URL returning the sheet as a gviz JSON envelope
        """
        return (
            f"{self.API_BASE}/{self.config.spreadsheet_id}/gviz/tq"
            f"?sheet={quote(table_name)}&tqx=out:json"
        )

    def parse_rows(self, payload: str, table_name: str) -> list[Row]:
        """Parse a gviz response into rows keyed by column label.

        Args:
            payload: Raw response body
            table_name: Sheet name, for error reporting

        Returns:
            List of rows

        Raises:
            ParseError: If the envelope or its table structure is malformed
        """
        table = extract_table(payload, table_name)

        try:
            labels = [col.get("label", "") for col in table["cols"]]
            raw_rows = table["rows"]
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(
                f"Malformed table structure in sheet {table_name}: {e}",
                table_name=table_name,
            ) from e

        if not isinstance(raw_rows, list):
            raise ParseError(
                f"Rows in sheet {table_name} are not a list",
                table_name=table_name,
            )

        rows: list[Row] = []
        for position, raw_row in enumerate(raw_rows):
            cells = _row_cells(raw_row, table_name, position)
            row: Row = {}
            for index, label in enumerate(labels):
                cell = cells[index] if index < len(cells) else None
                row[label] = cell_text(cell)
            rows.append(row)

        return rows


def _row_cells(raw_row: Any, table_name: str, position: int) -> list[Any]:
    if raw_row is None:
        return []
    cells = (raw_row.get("c") or []) if isinstance(raw_row, dict) else None
    if not isinstance(cells, list) or not all(c is None or isinstance(c, dict) for c in cells):
        raise ParseError(
            f"Malformed row {position} in sheet {table_name}",
            table_name=table_name,
            details={"row": position},
        )
    return cells


def extract_table(payload: str, table_name: str = "") -> dict[str, Any]:
    """Cut the JSON object out of a gviz envelope and return its ``table``."""
    start = payload.find("{")
    end = payload.rfind("}")
    if start == -1 or end < start:
        raise ParseError(
            f"No JSON object found in response for sheet {table_name}",
            table_name=table_name,
        )

    try:
        data = json.loads(payload[start:end + 1])
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Invalid JSON in response for sheet {table_name}: {e.msg}",
            table_name=table_name,
        ) from e

    if data.get("status") == "error":
        errors = data.get("errors")
        reasons = [
            err.get("detailed_message") or err.get("message") if isinstance(err, dict) else str(err)
            for err in (errors if isinstance(errors, list) else [])
        ]
        raise ParseError(
            f"Spreadsheet returned an error for sheet {table_name}: {reasons}",
            table_name=table_name,
            details={"errors": reasons},
        )

    table = data.get("table")
    if not isinstance(table, dict):
        raise ParseError(
            f"Response for sheet {table_name} has no table",
            table_name=table_name,
        )
    return table


def cell_text(cell: Optional[dict[str, Any]]) -> str:
    """Return a cell's text, preferring the formatted value over the raw one."""
    if not cell:
        return ""
    formatted = cell.get("f")
    if formatted is not None and formatted != "":
        return str(formatted)
    return _stringify(cell.get("v"))


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
