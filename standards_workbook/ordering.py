"""
Deterministic key ordering for diff-stable JSON output.
"""

import json
import logging
import os
from collections.abc import Mapping

logger = logging.getLogger(__name__)


def sort_keys_recursive(node, recursive=False, key=None):
    """Return a copy of *node* with mapping keys in ascending order.

    Parameters
    ----------
    node : Any
        A JSON-like value (mapping, list, or scalar).
    recursive : bool
        When true every nested mapping is sorted, including mappings held
        inside lists.  Otherwise only the top-level mapping is sorted.
    key : callable or None
        Optional sort key applied to mapping keys.

    Returns
    -------
    Any
        A new structure.  List order is never changed; scalars are returned
        as-is.  Applying the function twice gives the same result as once.
    """
    if isinstance(node, Mapping):
        if recursive:
            return {
                k: sort_keys_recursive(node[k], True, key)
                for k in sorted(node, key=key)
            }
        return {k: node[k] for k in sorted(node, key=key)}
    if isinstance(node, (list, tuple)):
        if recursive:
            return [sort_keys_recursive(item, True, key) for item in node]
        return list(node)
    return node


def dump_json(document, path, sort=True):
    """Write *document* to *path* as indented JSON.

    Returns
    -------
    str
        The path written.
    """
    if sort:
        document = sort_keys_recursive(document, recursive=True)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.debug("Wrote %s", path)
    return path
