"""Dashboard detail decomposition into widgets and NRQL queries."""

import logging
from collections.abc import Generator

from newrelic_export.common import graphql_error_messages
from newrelic_export.constants import NOT_FOUND_MESSAGE, WIDGET_QUERY_SLOTS
from newrelic_export.models import NrqlQuery, Widget

logger = logging.getLogger(__name__)


def select_nrql_queries(configuration: dict) -> list[dict]:
    """Return the raw queries of the first non-empty visualization slot.

    Slots are checked in a fixed order (area, bar, billboard, line, pie,
    table); at most one is expected to be populated.
    """
    for slot in WIDGET_QUERY_SLOTS:
        queries = ((configuration or {}).get(slot) or {}).get("nrqlQueries") or []
        if queries:
            return queries
    return []


def parse_widget(raw: dict) -> Widget | None:
    """Streamline a raw widget into a Widget record.

    Returns None when the widget id is not numeric.
    """
    try:
        widget_id = int(raw.get("id"))
    except (TypeError, ValueError):
        logger.warning("Error parsing widget id: %r", raw.get("id"))
        return None

    queries = [
        NrqlQuery(account_id=query.get("accountId"), query=query.get("query", ""))
        for query in select_nrql_queries(raw.get("configuration"))
    ]
    return Widget(id=widget_id, title=raw.get("title") or "", nrql_queries=queries)


def is_not_found(result: dict) -> bool:
    """Whether the first reported error says the entity no longer exists."""
    errors = graphql_error_messages(result)
    return bool(errors) and errors[0] == NOT_FOUND_MESSAGE


def process_dashboard_detail(
    result: dict, guid: str = ""
) -> Generator[Widget, None, None]:
    """Yield the widgets of a dashboard detail result, tagged with their page GUID.

    A "Not Found" error is an expected skip (deleted or inaccessible
    dashboard); any other reported error is logged and the dashboard skipped.
    Widgets without NRQL queries (markdown and the like) are dropped.

    Args:
        result: Parsed GraphQL detail response
        guid: GUID of the requested dashboard, for log messages
    """
    errors = graphql_error_messages(result)
    if errors:
        if is_not_found(result):
            logger.debug("Dashboard %s not found, skipping", guid)
            return
        logger.warning("Errors with dashboard detail query for %s: %s", guid, errors)
        return

    entity = ((result.get("data") or {}).get("actor") or {}).get("entity") or {}
    for page in entity.get("pages") or []:
        page_guid = page.get("guid", "")
        logger.debug("Found dashboard page %s", page_guid)
        for raw in page.get("widgets") or []:
            widget = parse_widget(raw)
            if widget is None or not widget.nrql_queries:
                # Skip if markdown or no queries
                continue
            widget.guid = page_guid
            yield widget
