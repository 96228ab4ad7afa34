"""Configuration and logging setup."""

import logging
import os

import yaml


DEFAULTS = {
    "fragments": [],
    "merged_json": "input.json",
    "workbook": "standards.xlsx",
    "output_json": "new_standards.json",
    "sort_keys": True,
    "skip_sheets": ["values", "formulas"],
    "strict_table_region": False,
    "snapshot_dir": None,
    "log_level": "INFO",
}


def load_config(config_path):
    """Load configuration from a YAML file on top of :data:`DEFAULTS`."""
    config = dict(DEFAULTS)
    config["fragments"] = list(DEFAULTS["fragments"])
    config["skip_sheets"] = list(DEFAULTS["skip_sheets"])
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        config.update(user_config)
    return config


def setup_logging(level_str: str = "INFO"):
    """Configure logging."""
    level = getattr(logging, str(level_str).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
