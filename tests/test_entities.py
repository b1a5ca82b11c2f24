"""Tests for newrelic_export/process/entities.py listing and classification."""

import logging
import time

import pytest

from newrelic_export.common import ExportTimeoutError
from newrelic_export.process.entities import (
    build_listing_query,
    fetch_dashboard_entities,
    parse_entity,
)


def _entity(guid, name="Dash", created_by="alice", is_page=None, account_id=1234567):
    tags = [{"key": "createdBy", "values": [created_by]}]
    if is_page is not None:
        tags.append({"key": "isDashboardPage", "values": ["true" if is_page else "false"]})
    return {
        "guid": guid,
        "accountId": account_id,
        "name": name,
        "permalink": f"https://one.newrelic.com/redirect/entity/{guid}",
        "tags": tags,
    }


def _listing_page(entities, next_cursor=None):
    return {
        "data": {
            "actor": {
                "entitySearch": {
                    "results": {"entities": entities, "nextCursor": next_cursor}
                }
            }
        }
    }


def _paged_handler(pages):
    """Serve listing pages keyed by the cursor that requests them."""

    def handler(payload):
        cursor = payload["variables"].get("cursor")
        return pages[cursor]

    return handler


class TestParseEntity:
    """Tests for parse_entity()."""

    def test_page_entity(self):
        dashboard = parse_entity(_entity("G1", name="Ops / Overview", is_page=True))

        assert dashboard.guid == "G1"
        assert dashboard.account_id == 1234567
        assert dashboard.name == "Ops / Overview"
        assert dashboard.created_by == "alice"
        assert dashboard.is_page is True
        assert dashboard.widget_map == {}
        assert dashboard.widget_ids == []

    def test_non_page_entity(self):
        dashboard = parse_entity(_entity("G2", created_by="bob", is_page=False))

        assert dashboard.created_by == "bob"
        assert dashboard.is_page is False

    def test_unexpected_tag_count_uses_defaults(self, caplog):
        """Wrong tag count is logged and defaults are kept, not rejected."""
        entity = _entity("G3", name="Odd", created_by="carol")  # only one tag

        with caplog.at_level(logging.WARNING):
            dashboard = parse_entity(entity, expected_tags=2)

        assert dashboard.guid == "G3"
        assert dashboard.created_by == ""
        assert dashboard.is_page is False
        assert any(
            "Expected 2 tags, found 1 on dashboard Odd" in r.message
            for r in caplog.records
        )

    def test_single_tag_expected_in_summary_mode(self):
        dashboard = parse_entity(_entity("G4", created_by="dave"), expected_tags=1)

        assert dashboard.created_by == "dave"
        assert dashboard.is_page is False

    def test_multi_valued_tag_ignored(self):
        entity = _entity("G5", is_page=True)
        entity["tags"][0]["values"] = ["alice", "bob"]

        dashboard = parse_entity(entity)

        assert dashboard.created_by == ""
        assert dashboard.is_page is True


class TestBuildListingQuery:
    def test_pages_mode_filters_both_tags(self):
        query = build_listing_query(42, "pages")

        assert "accountId = 42" in query
        assert 'tagFilter: ["createdBy","isDashboardPage"]' in query
        assert "nextCursor" in query

    def test_summary_mode_filters_creator_only(self):
        query = build_listing_query(42, "summary")

        assert 'tagFilter: ["createdBy"]' in query


class TestFetchDashboardEntities:
    """Tests for fetch_dashboard_entities() pagination."""

    def test_scenario_page_and_parent(self, make_client, api_client):
        """One page-type entity lands in the map, the other in the parent set."""
        pages = {
            None: _listing_page(
                [
                    _entity("ALICE-PAGE", created_by="alice", is_page=True),
                    _entity("BOB-DASH", created_by="bob", is_page=False),
                ]
            )
        }
        client = make_client(_paged_handler(pages))

        dashboard_map, parent_guids = fetch_dashboard_entities(client, api_client)

        assert list(dashboard_map) == ["ALICE-PAGE"]
        assert dashboard_map["ALICE-PAGE"].created_by == "alice"
        assert dashboard_map["ALICE-PAGE"].widget_map == {}
        assert parent_guids == ["BOB-DASH"]
        assert len(client.payloads) == 1

    def test_stops_after_page_with_null_cursor(self, make_client, api_client):
        """Exactly one request per page; parents are the deduplicated union."""
        pages = {
            None: _listing_page(
                [_entity("P1", is_page=True), _entity("D1", is_page=False)], "c1"
            ),
            "c1": _listing_page(
                [_entity("D2", is_page=False), _entity("D1", is_page=False)], "c2"
            ),
            "c2": _listing_page([_entity("P2", is_page=True)], None),
        }
        client = make_client(_paged_handler(pages))

        dashboard_map, parent_guids = fetch_dashboard_entities(client, api_client)

        assert len(client.payloads) == 3
        assert [p["variables"].get("cursor") for p in client.payloads] == [
            None,
            "c1",
            "c2",
        ]
        assert sorted(dashboard_map) == ["P1", "P2"]
        assert parent_guids == ["D1", "D2"]

    def test_first_request_has_no_cursor_variable(self, make_client, api_client):
        client = make_client(_paged_handler({None: _listing_page([])}))

        fetch_dashboard_entities(client, api_client)

        assert client.payloads[0]["variables"] == {}
        assert "accountId = 1234567" in client.payloads[0]["query"]

    def test_summary_mode_stores_every_entity(self, make_client, api_client):
        pages = {
            None: _listing_page([_entity("D1"), _entity("D2", created_by="bob")], "c1"),
            "c1": _listing_page([_entity("D3")]),
        }
        client = make_client(_paged_handler(pages))

        dashboard_map, parent_guids = fetch_dashboard_entities(
            client, api_client, mode="summary"
        )

        assert sorted(dashboard_map) == ["D1", "D2", "D3"]
        assert dashboard_map["D2"].created_by == "bob"
        assert parent_guids == []

    def test_repeated_cursor_stops_listing(self, make_client, api_client, caplog):
        pages = {
            None: _listing_page([_entity("D1", is_page=False)], "stuck"),
            "stuck": _listing_page([_entity("D2", is_page=False)], "stuck"),
        }
        client = make_client(_paged_handler(pages))

        with caplog.at_level(logging.WARNING):
            _, parent_guids = fetch_dashboard_entities(client, api_client)

        assert len(client.payloads) == 2
        assert parent_guids == ["D1", "D2"]
        assert any("same cursor" in r.message for r in caplog.records)

    def test_unreadable_page_ends_listing(self, make_client, api_client):
        """An empty body is not fatal; entities already listed are kept."""
        responses = {
            None: _listing_page([_entity("P1", is_page=True)], "c1"),
            "c1": b"",
        }
        client = make_client(_paged_handler(responses))

        dashboard_map, parent_guids = fetch_dashboard_entities(client, api_client)

        assert list(dashboard_map) == ["P1"]
        assert parent_guids == []

    def test_graphql_errors_logged_and_entities_kept(
        self, make_client, api_client, caplog
    ):
        page = _listing_page([_entity("P1", is_page=True)])
        page["errors"] = [{"message": "partial failure"}]
        client = make_client(_paged_handler({None: page}))

        with caplog.at_level(logging.WARNING):
            dashboard_map, _ = fetch_dashboard_entities(client, api_client)

        assert list(dashboard_map) == ["P1"]
        assert any("partial failure" in r.message for r in caplog.records)

    def test_expired_deadline_raises(self, make_client, api_client):
        client = make_client(_paged_handler({None: _listing_page([])}))

        with pytest.raises(ExportTimeoutError):
            fetch_dashboard_entities(
                client, api_client, deadline=time.monotonic() - 1
            )
        assert client.payloads == []
