#!/usr/bin/env python
"""
Standards Workbook – CLI entry point.

Usage:
    # Merge JSON fragments into one document
    standards-workbook load <fragment> [<fragment> ...] [--output input.json]

    # Write a document to an Excel workbook
    standards-workbook to-excel <document.json> [--output standards.xlsx]

    # Read an edited workbook back into JSON
    standards-workbook to-json <workbook.xlsx> [--output new_standards.json]
                               [--snapshot-dir DIR] [--strict]

    # load -> to-excel -> to-json in one go
    standards-workbook roundtrip <fragment> [<fragment> ...] [--workdir DIR]
"""

import argparse
import logging
import os
import sys

from .config import load_config, setup_logging
from .errors import StandardsWorkbookError
from .extractor import excel_to_json
from .store import load_documents
from .writer import json_to_excel

logger = logging.getLogger(__name__)


def run_round_trip(fragments, workdir, config):
    """Merge *fragments*, write the workbook, and read it back.

    Returns the extracted document.
    """
    merged_path = os.path.join(workdir, config["merged_json"])
    xlsx_path = os.path.join(workdir, config["workbook"])
    output_path = os.path.join(workdir, config["output_json"])

    logger.info("Step 1: Merging %d fragments...", len(fragments))
    load_documents(fragments, dump_path=merged_path)

    logger.info("Step 2: Writing workbook...")
    json_to_excel(merged_path, xlsx_path, sort_keys=config["sort_keys"])

    logger.info("Step 3: Reading workbook back...")
    return excel_to_json(
        xlsx_path,
        output_path=output_path,
        snapshot_dir=config["snapshot_dir"],
        skip_sheets=config["skip_sheets"],
        strict=config["strict_table_region"],
    )


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="standards-workbook",
        description="Standards JSON <-> Excel workbook: write, edit, read back",
    )
    parser.add_argument("--config", default="config.yaml",
                        help="Path to config YAML file (default: config.yaml)")
    parser.add_argument("--log-level", default=None,
                        help="Logging level: DEBUG, INFO, WARNING, ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    # ---- load ----
    p_load = sub.add_parser("load", help="Merge JSON fragments into one document")
    p_load.add_argument("fragments", nargs="*", help="JSON fragment files")
    p_load.add_argument("--output", default=None,
                        help="Merged document path (default: input.json)")

    # ---- to-excel ----
    p_xl = sub.add_parser("to-excel", help="Write a JSON document to a workbook")
    p_xl.add_argument("json_file", help="Path to the standards document (.json)")
    p_xl.add_argument("--output", default=None,
                      help="Workbook path (default: standards.xlsx)")
    p_xl.add_argument("--no-sort", action="store_true",
                      help="Keep the document's key order instead of sorting")

    # ---- to-json ----
    p_js = sub.add_parser("to-json", help="Read an edited workbook back to JSON")
    p_js.add_argument("xlsx_file", help="Path to the workbook (.xlsx)")
    p_js.add_argument("--output", default=None,
                      help="Output document path (default: new_standards.json)")
    p_js.add_argument("--snapshot-dir", default=None,
                      help="Also dump each worksheet to <title>.new.json here")
    p_js.add_argument("--strict", action="store_true",
                      help="Fail on worksheets without a 'Table' row")

    # ---- roundtrip ----
    p_rt = sub.add_parser("roundtrip", help="load, to-excel and to-json in one run")
    p_rt.add_argument("fragments", nargs="*", help="JSON fragment files")
    p_rt.add_argument("--workdir", default=".",
                      help="Directory for the generated files (default: .)")

    return parser


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(args.log_level or config["log_level"])

    try:
        if args.command == "load":
            fragments = args.fragments or config["fragments"]
            load_documents(fragments, dump_path=args.output or config["merged_json"])

        elif args.command == "to-excel":
            json_to_excel(
                args.json_file,
                args.output or config["workbook"],
                sort_keys=config["sort_keys"] and not args.no_sort,
            )

        elif args.command == "to-json":
            excel_to_json(
                args.xlsx_file,
                output_path=args.output or config["output_json"],
                snapshot_dir=args.snapshot_dir or config["snapshot_dir"],
                skip_sheets=config["skip_sheets"],
                strict=args.strict or config["strict_table_region"],
            )

        elif args.command == "roundtrip":
            fragments = args.fragments or config["fragments"]
            run_round_trip(fragments, args.workdir, config)

    except FileNotFoundError as exc:
        logger.error("File not found: %s", exc.filename)
        return 1
    except StandardsWorkbookError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
