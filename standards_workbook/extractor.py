"""
Parse an edited standards workbook back into a JSON document.

Each worksheet is read top to bottom by a three-state machine:

``SCANNING_PREAMBLE``
    Rows whose first cell is non-empty record ``first cell -> second cell``
    as a scalar field of the category.  A first cell equal to ``Table``
    moves to ``AWAITING_HEADER``.
``AWAITING_HEADER``
    The next row, whatever it holds, is the table header.
``READING_DATA``
    Every remaining row becomes one record.  There is only one table region
    per worksheet: a later ``Table`` row is read as an ordinary record.
"""

import enum
import io
import logging
import os

from openpyxl import load_workbook

from .coercer import coerce_cell
from .errors import TableRegionError
from .ordering import dump_json
from .store import shallow_merge
from .writer import TABLE_SENTINEL

logger = logging.getLogger(__name__)

SKIPPED_SHEETS = ("values", "formulas")


class ExtractorState(enum.Enum):
    SCANNING_PREAMBLE = "scanning_preamble"
    AWAITING_HEADER = "awaiting_header"
    READING_DATA = "reading_data"


def _is_empty(value):
    return value is None or value == ""


def _trim_trailing_empty(values):
    values = list(values)
    while values and _is_empty(values[-1]):
        values.pop()
    return values


def _build_record(header, row, sheet_name, row_number):
    record = {}
    dropped = [v for v in row[len(header):] if not _is_empty(v)]
    for index, name in enumerate(header):
        value = row[index] if index < len(row) else None
        if _is_empty(name):
            if not _is_empty(value):
                dropped.append(value)
            continue
        record[name] = coerce_cell(value)
    if dropped:
        logger.warning(
            "%s row %d: dropped %d value(s) without a table header",
            sheet_name, row_number, len(dropped),
        )
    return record


def extract_sheet(rows, sheet_name="", strict=False):
    """Extract one worksheet into a table category.

    Parameters
    ----------
    rows : iterable of sequences
        Raw cell values, one sequence per row, in sheet order (as yielded
        by ``ws.iter_rows(values_only=True)``).
    sheet_name : str
        Used in log and error messages.
    strict : bool
        Raise :class:`TableRegionError` when no ``Table`` row is found.
        Otherwise such a sheet yields its scalar fields and an empty table.

    Returns
    -------
    dict
        ``{scalar fields..., "table": [records...]}``
    """
    state = ExtractorState.SCANNING_PREAMBLE
    category = {}
    header = []
    records = []

    for row_number, row in enumerate(rows, 1):
        row = list(row or ())
        marker = row[0] if row else None

        if state is ExtractorState.SCANNING_PREAMBLE:
            if marker == TABLE_SENTINEL:
                state = ExtractorState.AWAITING_HEADER
            elif not _is_empty(marker):
                category[marker] = coerce_cell(row[1] if len(row) > 1 else None)

        elif state is ExtractorState.AWAITING_HEADER:
            header = _trim_trailing_empty(row)
            state = ExtractorState.READING_DATA

        else:
            records.append(_build_record(header, row, sheet_name, row_number))

    if state is ExtractorState.SCANNING_PREAMBLE:
        if strict:
            raise TableRegionError(sheet_name)
        logger.debug("%s: no table region, %d scalar fields", sheet_name, len(category))

    category["table"] = records
    return category


def extract_document(sheets, skip_sheets=SKIPPED_SHEETS, strict=False,
                     on_sheet=None):
    """Extract every worksheet and merge the results into one document.

    Parameters
    ----------
    sheets : iterable of (str, iterable)
        ``(title, rows)`` pairs in workbook order.
    skip_sheets : collection of str
        Worksheet titles that are never read back.
    strict : bool
        Passed to :func:`extract_sheet`.
    on_sheet : callable or None
        Called as ``on_sheet(title, single_sheet_document)`` for each
        extracted worksheet before it is merged.

    Returns
    -------
    dict
        Mapping of worksheet title to category.  A later worksheet with the
        same title replaces an earlier one entirely.
    """
    output = {}
    for title, rows in sheets:
        if title in skip_sheets:
            logger.debug("Skipping worksheet '%s'", title)
            continue
        parent = {title: extract_sheet(rows, sheet_name=title, strict=strict)}
        if on_sheet is not None:
            on_sheet(title, parent)
        if title in output:
            logger.warning("Worksheet '%s' replaces an earlier one", title)
        output = shallow_merge(output, parent)
    return output


def _iter_sheets(wb):
    for ws in wb.worksheets:
        yield ws.title, ws.iter_rows(values_only=True)


def _extract_workbook(wb, **options):
    try:
        return extract_document(_iter_sheets(wb), **options)
    finally:
        wb.close()


def from_workbook(data, **options):
    """Parse ``.xlsx`` file contents (bytes) into a document.

    Keyword options are passed to :func:`extract_document`.
    """
    return _extract_workbook(load_workbook(io.BytesIO(data)), **options)


def snapshot_writer(snapshot_dir):
    """Return an ``on_sheet`` hook dumping each sheet to ``<title>.new.json``."""
    def _dump(title, document):
        dump_json(document, os.path.join(snapshot_dir, f"{title}.new.json"))
    return _dump


def excel_to_json(xlsx_path, output_path=None, snapshot_dir=None,
                  skip_sheets=SKIPPED_SHEETS, strict=False):
    """Convert an edited workbook file back into a JSON document.

    Parameters
    ----------
    xlsx_path : str
        Workbook to read.
    output_path : str or None
        If given, the key-sorted aggregate document is written there.
    snapshot_dir : str or None
        If given, each worksheet's result is also dumped on its own.
    skip_sheets, strict
        See :func:`extract_document`.

    Returns
    -------
    dict
        The extracted document.
    """
    on_sheet = snapshot_writer(snapshot_dir) if snapshot_dir else None
    document = _extract_workbook(
        load_workbook(xlsx_path),
        skip_sheets=skip_sheets,
        strict=strict,
        on_sheet=on_sheet,
    )
    logger.info("Extracted %d worksheets from %s", len(document), xlsx_path)

    if output_path:
        dump_json(document, output_path)
        logger.info("Wrote %s", output_path)
    return document
