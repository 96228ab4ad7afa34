"""Standards Workbook Converter.

Round-trips a building-standards JSON document through an Excel workbook so
the data can be edited by hand:

  * :func:`to_workbook` renders ``constants``, ``formulas`` and every entry
    of ``tables`` as worksheets.
  * :func:`from_workbook` reads the edited workbook back, decoding cell text
    that holds JSON into numbers, booleans, lists and objects.
"""

from .coercer import coerce_cell
from .errors import (
    DocumentError,
    SchemaError,
    StandardsWorkbookError,
    TableRegionError,
)
from .extractor import (
    ExtractorState,
    excel_to_json,
    extract_document,
    extract_sheet,
    from_workbook,
)
from .ordering import dump_json, sort_keys_recursive
from .store import load_documents, recursive_merge, shallow_merge
from .writer import json_to_excel, render_workbook, to_workbook

__all__ = [
    "coerce_cell",
    "sort_keys_recursive",
    "dump_json",
    "load_documents",
    "shallow_merge",
    "recursive_merge",
    "render_workbook",
    "to_workbook",
    "json_to_excel",
    "ExtractorState",
    "extract_sheet",
    "extract_document",
    "from_workbook",
    "excel_to_json",
    "StandardsWorkbookError",
    "SchemaError",
    "TableRegionError",
    "DocumentError",
]
