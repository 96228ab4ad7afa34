"""
Render a canonical standards document into an Excel workbook.

Layout
------
* ``constants`` and ``formulas`` each get a worksheet holding a bold header
  row (the union of all record keys, first-seen order) followed by one row
  per record.
* Every entry of ``tables`` gets a worksheet titled by its ``name``.  The
  scalar fields come first (bold key in column A, value in column B), then a
  blank row, the ``Table`` sentinel row, the header row and the records.
"""

import io
import json
import logging
import os

from openpyxl import Workbook
from openpyxl.styles import Font

from .errors import SchemaError
from .ordering import sort_keys_recursive
from .store import read_json

logger = logging.getLogger(__name__)

TABLE_SENTINEL = "Table"
BLANK_RECORD = "null"
FLAT_CATEGORIES = ("constants", "formulas")
REQUIRED_KEYS = FLAT_CATEGORIES + ("tables",)

_BOLD_FONT = Font(bold=True)


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def _check_records(records, where):
    if not isinstance(records, list):
        raise SchemaError(f"{where} must be a list, got {type(records).__name__}")
    for i, record in enumerate(records):
        if not isinstance(record, dict):
            raise SchemaError(
                f"{where}[{i}] must be an object, got {type(record).__name__}"
            )
        if "" in record:
            raise SchemaError(f"{where}[{i}] has an empty field name")


def validate_document(document):
    """Raise :class:`SchemaError` unless *document* can be rendered."""
    if not isinstance(document, dict):
        raise SchemaError(f"Document must be an object, got {type(document).__name__}")

    missing = [k for k in REQUIRED_KEYS if k not in document]
    if missing:
        raise SchemaError(f"Document is missing required keys: {', '.join(missing)}")
    extra = [k for k in document if k not in REQUIRED_KEYS]
    if extra:
        raise SchemaError(f"Document has unexpected keys: {', '.join(map(str, extra))}")

    for name in FLAT_CATEGORIES:
        _check_records(document[name], name)

    tables = document["tables"]
    if not isinstance(tables, list):
        raise SchemaError(f"tables must be a list, got {type(tables).__name__}")

    titles = set(FLAT_CATEGORIES)
    for i, table in enumerate(tables):
        if not isinstance(table, dict):
            raise SchemaError(f"tables[{i}] must be an object")
        name = table.get("name")
        if not isinstance(name, str) or not name:
            raise SchemaError(f"tables[{i}] needs a non-empty string 'name'")
        if "table" not in table:
            raise SchemaError(f"tables[{i}] ('{name}') has no 'table' field")
        _check_records(table["table"], f"tables[{i}].table")
        if TABLE_SENTINEL in table:
            raise SchemaError(
                f"tables[{i}] ('{name}') has a field named '{TABLE_SENTINEL}', "
                "which would be read back as the table start"
            )
        if "" in table:
            raise SchemaError(f"tables[{i}] ('{name}') has an empty field name")
        if table["table"] and not collect_headers(table["table"]):
            raise SchemaError(
                f"tables[{i}] ('{name}') has records but no field names"
            )
        if name in titles:
            raise SchemaError(f"Duplicate worksheet title '{name}'")
        titles.add(name)


# ------------------------------------------------------------------
# Cell helpers
# ------------------------------------------------------------------

def collect_headers(records):
    """Return the union of the keys of *records*, in first-seen order."""
    headers = []
    seen = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def _cell_value(value):
    """Convert a document value into something a worksheet cell can hold."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return value


def _write_bold(ws, row, column, value):
    cell = ws.cell(row=row, column=column, value=_cell_value(value))
    cell.font = _BOLD_FONT
    return cell


def write_records(ws, records, start_row=1):
    """Write a header row plus one row per record starting at *start_row*.

    Returns the next free row number.
    """
    headers = collect_headers(records)
    for ci, header in enumerate(headers, 1):
        _write_bold(ws, start_row, ci, header)

    row = start_row + 1
    for record in records:
        written = False
        for ci, header in enumerate(headers, 1):
            if record.get(header) is not None:
                ws.cell(row=row, column=ci, value=_cell_value(record[header]))
                written = True
        if not written and headers:
            # A row with no cells is not saved; JSON null keeps it readable.
            ws.cell(row=row, column=1, value=BLANK_RECORD)
        row += 1
    return row


def write_table_category(ws, category):
    """Write the scalar fields, sentinel, header and records of one table."""
    row = 1
    for key, value in category.items():
        if key == "table":
            continue
        _write_bold(ws, row, 1, key)
        ws.cell(row=row, column=2, value=_cell_value(value))
        row += 1

    row += 1  # blank separator
    ws.cell(row=row, column=1, value=TABLE_SENTINEL)
    return write_records(ws, category["table"], start_row=row + 1)


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------

def _create_sheet(wb, title):
    try:
        return wb.create_sheet(title)
    except ValueError as exc:
        raise SchemaError(f"Invalid worksheet title '{title}': {exc}") from exc


def render_workbook(document):
    """Render *document* into a new :class:`openpyxl.Workbook`."""
    validate_document(document)

    wb = Workbook()
    has_default = "Sheet" in wb.sheetnames

    for name in FLAT_CATEGORIES:
        ws = _create_sheet(wb, name)
        write_records(ws, document[name])
        logger.debug("Wrote %d %s rows", len(document[name]), name)

    for table in document["tables"]:
        ws = _create_sheet(wb, table["name"])
        write_table_category(ws, table)
        logger.debug("Wrote table '%s' (%d rows)", table["name"], len(table["table"]))

    if has_default and "Sheet" in wb.sheetnames and len(wb.sheetnames) > 1:
        del wb["Sheet"]
    return wb


def to_workbook(document):
    """Render *document* and return the ``.xlsx`` file contents as bytes."""
    wb = render_workbook(document)
    buffer = io.BytesIO()
    try:
        wb.save(buffer)
    finally:
        wb.close()
    return buffer.getvalue()


def json_to_excel(json_path, xlsx_path, sort_keys=True):
    """Convert a JSON standards document file into an Excel workbook file.

    Parameters
    ----------
    json_path : str
        Path to the merged standards document.
    xlsx_path : str
        Where to write the workbook.
    sort_keys : bool
        Sort mapping keys recursively before writing.  Table order in the
        ``tables`` list is kept as given.

    Returns
    -------
    str
        Path to the generated workbook.
    """
    document = read_json(json_path)
    if sort_keys:
        document = sort_keys_recursive(document, recursive=True)

    wb = render_workbook(document)
    try:
        os.makedirs(os.path.dirname(xlsx_path) or ".", exist_ok=True)
        wb.save(xlsx_path)
    finally:
        wb.close()

    logger.info("Generated workbook: %s (%d tables)", xlsx_path, len(document["tables"]))
    return xlsx_path
