"""Flatten the dashboard map into CSV rows and write the export file."""

import logging

from newrelic_export.constants import (
    MODE_PAGES,
    PAGES_CSV_FIELDS,
    SUMMARY_CSV_FIELDS,
)
from newrelic_export.export.utils import csv_filename, log_export, write_to_csv

logger = logging.getLogger(__name__)


def _dashboard_columns(dashboard):
    return {
        "accountId": dashboard.account_id,
        "guid": dashboard.guid,
        "name": dashboard.name,
        "permalink": dashboard.permalink,
        "createdBy": dashboard.created_by,
    }


def build_query_rows(dashboard_map):
    """One row per NRQL query, dashboards by GUID and widgets by sorted id."""
    rows = []
    for guid in sorted(dashboard_map):
        dashboard = dashboard_map[guid]
        for widget_id in dashboard.widget_ids:
            widget = dashboard.widget_map[widget_id]
            for query in widget.nrql_queries:
                row = _dashboard_columns(dashboard)
                row.update(
                    {
                        "chartId": widget_id,
                        "chartName": widget.title,
                        "nrqlAccountId": query.account_id,
                        "nrqlQuery": query.query,
                    }
                )
                rows.append(row)
    return rows


def build_summary_rows(dashboard_map):
    """One row per dashboard, ordered by GUID."""
    return [_dashboard_columns(dashboard_map[guid]) for guid in sorted(dashboard_map)]


def export_dashboards_csv(dashboard_map, export_dir, account_id, mode=MODE_PAGES):
    """Write the dashboards CSV for one account.

    Returns:
        tuple: (path written, number of data rows)
    """
    if mode == MODE_PAGES:
        rows = build_query_rows(dashboard_map)
        fieldnames = PAGES_CSV_FIELDS
        label = "queries"
    else:
        rows = build_summary_rows(dashboard_map)
        fieldnames = SUMMARY_CSV_FIELDS
        label = "dashboards"

    filename = csv_filename(account_id)
    csv_path, count = write_to_csv(rows, export_dir, filename, fieldnames)
    log_export(label, count, csv_path)
    return csv_path, count
