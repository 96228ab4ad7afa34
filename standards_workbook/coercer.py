"""
Cell value decoding.

Cells edited by hand hold plain text; a cell whose text is valid JSON is
decoded into the matching value so numbers, booleans, lists and objects
survive the trip through the spreadsheet.
"""

import json


def _reject_constant(name):
    # NaN / Infinity are not JSON; keep such cells as text.
    raise ValueError(f"Invalid JSON constant: {name}")


def coerce_cell(value):
    """Decode a raw cell value into a typed value.

    1. A string that parses as JSON becomes the parsed value (any shape).
    2. Otherwise the strings ``"true"`` / ``"false"`` become booleans.
    3. Anything else, including ``None``, is returned unchanged.

    Never raises.
    """
    if isinstance(value, str):
        try:
            return json.loads(value, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            pass
        if value == "true":
            return True
        if value == "false":
            return False
    return value
