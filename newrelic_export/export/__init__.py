"""Export module for New Relic dashboards.

Main entry point:
    export_all_dashboards - Orchestrates listing, detail fetch and CSV export
"""

import logging

from newrelic_export.export.fetch import fetch_all_dashboard_data
from newrelic_export.export.writers import export_dashboards_csv

logger = logging.getLogger(__name__)


def export_all_dashboards(config, output_dir=None, client_factory=None):
    """Export all dashboards of the configured account to CSV.

    Args:
        config: ExportConfig instance with New Relic credentials and options
        output_dir: Directory for the CSV file (default: config.OUTPUT_DIR)
        client_factory: Optional callable returning a fresh HTTP client

    Returns:
        dict: Export results with csv_path and counts

    Raises:
        ConfigError: when required configuration is missing or malformed
        ExportTimeoutError: when the run deadline passes
    """
    config.validate()
    export_dir = output_dir or config.OUTPUT_DIR

    logger.info("Fetching dashboards from New Relic API...")
    data = fetch_all_dashboard_data(config, client_factory=client_factory)
    dashboard_map = data["dashboard_map"]

    logger.info("Writing export...")
    logger.info("=" * 70)
    csv_path, row_count = export_dashboards_csv(
        dashboard_map, export_dir, config.ACCOUNT_ID, config.EXPORT_MODE
    )
    logger.info("Done")

    return {
        "csv_path": csv_path,
        "account_id": config.ACCOUNT_ID,
        "mode": config.EXPORT_MODE,
        "dashboard_count": len(dashboard_map),
        "parent_count": len(data["parent_guids"]),
        "widget_count": data["widget_count"],
        "row_count": row_count,
    }


__all__ = ["export_all_dashboards", "fetch_all_dashboard_data"]
