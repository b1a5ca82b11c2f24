"""Common utilities for New Relic API interaction."""

import json
import logging


class ExportError(Exception):
    """Base error for a failed export run."""


class ConfigError(ExportError):
    """Required configuration is missing or malformed."""


class ExportTimeoutError(ExportError):
    """The run deadline passed before retrieval finished."""


def configure_logging(debug=False):
    """Configure root logging with a message-only format.

    Args:
        debug: Log at DEBUG level when True, INFO otherwise
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        force=True,
    )


def get_api_client(config=None, client=None):
    """Create API client settings from configuration.

    The returned dict is read-only shared state for one pipeline run: the
    GraphQL endpoint, the account being exported and the request headers.

    Args:
        config: ExportConfig instance with GRAPHQL_URL, ACCOUNT_ID, USER_KEY
        client: Existing client dict, returned unchanged when given

    Returns:
        dict: API client configuration
    """
    if client is not None:
        return client
    if config is None:
        raise ValueError("Either client or config must be provided")
    return {
        "endpoint": config.GRAPHQL_URL,
        "account_id": config.ACCOUNT_ID,
        "headers": {
            "Content-Type": "application/json",
            "API-Key": config.USER_KEY,
        },
        "timeout": config.REQUEST_TIMEOUT,
    }


def build_graphql_payload(query, variables=None):
    """Serialize a GraphQL query and its variables to a JSON request body."""
    return json.dumps({"query": query, "variables": variables or {}})


def graphql_error_messages(result):
    """Return the error messages reported in a GraphQL result."""
    errors = result.get("errors") or []
    return [error.get("message", "") for error in errors if isinstance(error, dict)]


def mask_secret(value, visible=4):
    """Mask all but the last few characters of a secret for display."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
