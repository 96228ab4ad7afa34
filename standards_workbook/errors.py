"""Exceptions raised by the standards workbook converter."""


class StandardsWorkbookError(Exception):
    """Base class for all converter errors."""


class SchemaError(StandardsWorkbookError):
    """The document handed to the writer does not have the expected shape."""


class TableRegionError(StandardsWorkbookError):
    """A worksheet has no ``Table`` sentinel row (strict extraction only)."""

    def __init__(self, sheet_name):
        self.sheet_name = sheet_name
        super().__init__(
            f"Worksheet '{sheet_name}' has no 'Table' row; no table region found"
        )


class DocumentError(StandardsWorkbookError):
    """A JSON fragment could not be decoded into a document."""
