"""Dashboard listing: entity search pagination and classification."""

import logging
import time

from newrelic_export.client import post_graphql
from newrelic_export.common import ExportTimeoutError, graphql_error_messages
from newrelic_export.constants import DASHBOARD_LIST_QUERY, LISTING_TAGS, MODE_PAGES
from newrelic_export.models import Dashboard

logger = logging.getLogger(__name__)


def build_listing_query(account_id, mode=MODE_PAGES):
    """Build the entity search query for an account and export mode."""
    tag_filter = ",".join(f'"{tag}"' for tag in LISTING_TAGS[mode])
    return DASHBOARD_LIST_QUERY % (account_id, tag_filter)


def parse_entity(entity, expected_tags=2):
    """Convert a listed entity into a Dashboard record.

    The entity is classified by its tags: ``createdBy`` gives the creator and
    ``isDashboardPage`` marks page entities. When the tag count differs from
    ``expected_tags`` the mismatch is logged and the defaults are kept.
    """
    dashboard = Dashboard(
        account_id=entity.get("accountId"),
        guid=entity.get("guid", ""),
        name=entity.get("name", ""),
        permalink=entity.get("permalink", ""),
    )

    tags = entity.get("tags") or []
    if len(tags) != expected_tags:
        logger.warning(
            "Expected %d tags, found %d on dashboard %s",
            expected_tags,
            len(tags),
            dashboard.name,
        )
        return dashboard

    for tag in tags:
        values = tag.get("values") or []
        if len(values) != 1:
            continue
        if tag.get("key") == "createdBy":
            dashboard.created_by = values[0]
        elif tag.get("key") == "isDashboardPage":
            dashboard.is_page = values[0] == "true"
    return dashboard


def fetch_dashboard_entities(client, api_client, mode=MODE_PAGES, deadline=None):
    """Page through the dashboard entity search for one account.

    In "pages" mode page entities are stored in the returned map with an empty
    widget map and every other entity's GUID is collected for the detail
    stage. In "summary" mode every entity is a complete record.

    Args:
        client: RetryingClient used for the listing requests
        api_client: dict from get_api_client()
        mode: Export mode, "pages" or "summary"
        deadline: time.monotonic() value after which the listing is abandoned

    Returns:
        tuple: (dashboard_map keyed by GUID, list of parent GUIDs)
    """
    query = build_listing_query(api_client["account_id"], mode)
    expected_tags = len(LISTING_TAGS[mode])

    dashboard_map = {}
    parent_guids = []
    seen_parents = set()
    variables = {}
    page = 0

    while True:
        if deadline is not None and time.monotonic() > deadline:
            raise ExportTimeoutError(
                f"Run deadline passed while listing dashboards (page {page})"
            )

        page += 1
        result = post_graphql(client, api_client, query, variables, "dashboard list")
        if result is None:
            logger.error("Dashboard listing page %d could not be read", page)
            break

        errors = graphql_error_messages(result)
        if errors:
            logger.warning("Errors with dashboard list query: %s", errors)

        search = (
            ((result.get("data") or {}).get("actor") or {}).get("entitySearch") or {}
        )
        results = search.get("results") or {}

        for entity in results.get("entities") or []:
            dashboard = parse_entity(entity, expected_tags)
            if mode == MODE_PAGES and not dashboard.is_page:
                # Parent dashboard: its pages and widgets come from the detail query
                if dashboard.guid not in seen_parents:
                    seen_parents.add(dashboard.guid)
                    parent_guids.append(dashboard.guid)
            else:
                dashboard_map[dashboard.guid] = dashboard

        next_cursor = results.get("nextCursor")
        if next_cursor is None:
            break
        if next_cursor == variables.get("cursor"):
            logger.warning(
                "Dashboard listing returned the same cursor twice, stopping at page %d",
                page,
            )
            break
        variables = {"cursor": str(next_cursor)}

    logger.info(
        "Found %d dashboards, %d total pages in %d listing request(s)",
        len(parent_guids),
        len(dashboard_map),
        page,
    )
    return dashboard_map, parent_guids
