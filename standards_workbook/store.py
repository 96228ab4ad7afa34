"""
Loading and merging of JSON document fragments.
"""

import json
import logging
from collections.abc import Mapping

from .errors import DocumentError
from .ordering import dump_json

logger = logging.getLogger(__name__)


def read_json(path):
    """Read one JSON fragment; the top level must be an object."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as exc:
            raise DocumentError(f"Invalid JSON in '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise DocumentError(
            f"'{path}' must hold a JSON object, got {type(data).__name__}"
        )
    return data


def shallow_merge(a, b):
    """Return a new dict with the top-level keys of *b* replacing those of *a*."""
    merged = dict(a)
    merged.update(b)
    return merged


def recursive_merge(a, b):
    """Deep-merge two mappings without mutating either.

    Keys present in both whose values are both mappings are merged
    recursively; for every other key the value from *b* wins.
    """
    merged = dict(a)
    for key, b_item in b.items():
        a_item = merged.get(key)
        if isinstance(a_item, Mapping) and isinstance(b_item, Mapping):
            merged[key] = recursive_merge(a_item, b_item)
        else:
            merged[key] = b_item
    return merged


def load_documents(paths, dump_path=None):
    """Load JSON fragments and merge them left to right.

    The merge is shallow: a later fragment's top-level key replaces an
    earlier one of the same name.

    Parameters
    ----------
    paths : list[str]
        Fragment files, applied in order.
    dump_path : str or None
        If given, the merged document is also written there.

    Returns
    -------
    dict
        The merged document.
    """
    document = {}
    for path in paths:
        fragment = read_json(path)
        replaced = sorted(set(document) & set(fragment))
        if replaced:
            logger.info("%s replaces top-level keys: %s", path, ", ".join(replaced))
        document = shallow_merge(document, fragment)
        logger.debug("Loaded %s (%d top-level keys)", path, len(fragment))

    if dump_path:
        dump_json(document, dump_path, sort=False)
        logger.info("Merged %d fragments into %s", len(paths), dump_path)
    return document
