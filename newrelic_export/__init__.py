"""New Relic Export - Export dashboard NRQL queries to CSV.

This library lists the dashboards of a New Relic account through NerdGraph,
fetches every dashboard's widgets in parallel and flattens their NRQL
queries into a CSV file.

Basic usage:
    from newrelic_export import export_dashboards

    result = export_dashboards(
        account_id=1234567,
        user_key="NRAK-...",
        output_dir="output",
    )

    print(f"CSV written to: {result['csv_path']}")
"""

from newrelic_export.config import ExportConfig
from newrelic_export.export import export_all_dashboards, fetch_all_dashboard_data


def export_dashboards(
    account_id: int,
    user_key: str,
    output_dir: str = "output",
    export_mode: str = "pages",
    max_workers: int = 10,
    request_timeout: float = 30,
    run_timeout: float = 1800,
    graphql_url=None,
    debug: bool = False,
):
    """Export New Relic dashboards to CSV.

    Args:
        account_id: New Relic account ID
        user_key: User API key
        output_dir: Directory for the CSV file (default: "output")
        export_mode: "pages" for one row per NRQL query, "summary" for one
            row per dashboard (default: "pages")
        max_workers: Number of parallel dashboard detail requestors (default: 10)
        request_timeout: Per-request timeout in seconds (default: 30)
        run_timeout: Deadline for the whole retrieval in seconds, 0 disables
            (default: 1800)
        graphql_url: NerdGraph endpoint override (default: US endpoint)
        debug: Enable debug logging (default: False)

    Returns:
        dict: Export results containing csv_path, account_id, mode,
            dashboard_count, parent_count, widget_count and row_count
    """
    config = ExportConfig(
        account_id=account_id,
        user_key=user_key,
        graphql_url=graphql_url,
        max_workers=max_workers,
        request_timeout=request_timeout,
        run_timeout=run_timeout,
        export_mode=export_mode,
        output_dir=output_dir,
        debug=debug,
        load_from_env=False,  # Don't load from .env when using this API
    )
    return export_all_dashboards(config=config, output_dir=output_dir)


__all__ = [
    "export_dashboards",
    "ExportConfig",
    "export_all_dashboards",
    "fetch_all_dashboard_data",
]
__version__ = "1.0.0"
