"""New Relic data processing module.

Organized into submodules:
- entities: Dashboard listing (entity search pagination, tag classification)
- widgets: Dashboard detail decomposition (widgets, NRQL queries)
"""

from newrelic_export.process.entities import (
    build_listing_query,
    fetch_dashboard_entities,
    parse_entity,
)
from newrelic_export.process.widgets import (
    is_not_found,
    parse_widget,
    process_dashboard_detail,
    select_nrql_queries,
)

__all__ = [
    # Entities
    "build_listing_query",
    "fetch_dashboard_entities",
    "parse_entity",
    # Widgets
    "is_not_found",
    "parse_widget",
    "process_dashboard_detail",
    "select_nrql_queries",
]
