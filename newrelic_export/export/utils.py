"""Utility functions for export operations."""

import csv
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def clean_field(value):
    """Replace actual newlines with literal '\\n' string"""
    if isinstance(value, str):
        return value.replace("\n", "\\n").replace("\r", "")
    return value


def ensure_export_directory(export_dir):
    """Create export directory if it doesn't exist"""
    Path(export_dir).mkdir(parents=True, exist_ok=True)
    return export_dir


def csv_filename(account_id):
    return f"dashboards_{account_id}.csv"


def write_to_csv(data, export_dir, filename, fieldnames):
    """Write rows to a CSV file in the export directory.

    Returns:
        tuple: (path written, number of data rows)
    """
    ensure_export_directory(export_dir)
    filepath = Path(export_dir) / filename

    with open(filepath, "w", encoding="utf-8-sig", newline="") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames, quoting=csv.QUOTE_ALL)
        writer.writeheader()
        for row in data:
            writer.writerow({k: clean_field(v) for k, v in row.items()})
    return filepath, len(data)


def log_export(name, count, csv_path):
    """Standardized logging for exports"""
    logger.info("Writing csv %s with %d %s", csv_path, count, name)
