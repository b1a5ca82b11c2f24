"""HTTP access to the NerdGraph endpoint with bounded retry."""

import json
import logging
import time

import requests

from newrelic_export.common import build_graphql_payload
from newrelic_export.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    MAX_ATTEMPTS,
    RETRY_DELAY_SECONDS,
    SUCCESS_STATUS_CODES,
)

logger = logging.getLogger(__name__)


class RetryingClient:
    """Issue single HTTP requests, retrying transport and status failures.

    Each instance owns one ``requests.Session``; detail workers create their
    own instance rather than sharing one across threads.
    """

    def __init__(
        self,
        session=None,
        max_attempts=MAX_ATTEMPTS,
        retry_delay=RETRY_DELAY_SECONDS,
        timeout=DEFAULT_REQUEST_TIMEOUT,
    ):
        self.session = session if session is not None else requests.Session()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout

    def request(self, method, url, data=None, headers=None) -> bytes:
        """Perform the request and return the raw response body.

        Retries when no response arrives or the status is not 200/202, with a
        fixed delay before every retry. Once attempts run out the last
        response is used whatever its status. When no response was ever
        received the failure is logged and an empty body is returned.
        """
        response = None
        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                time.sleep(self.retry_delay)
            try:
                response = self.session.request(
                    method,
                    url,
                    data=data,
                    headers=headers or {},
                    timeout=self.timeout,
                )
            except requests.exceptions.RequestException as e:
                logger.warning("Retry %d: no response (%s)", attempt, e)
                continue

            if response.status_code in SUCCESS_STATUS_CODES:
                break
            logger.warning("Retry %d: http status %d", attempt, response.status_code)

        if response is None:
            logger.error(
                "No response from %s after %d attempts", url, self.max_attempts
            )
            return b""
        return response.content

    def close(self):
        self.session.close()


def post_graphql(client, api_client, query, variables=None, description="GraphQL"):
    """Post a GraphQL query and parse the JSON result.

    Args:
        client: RetryingClient (or anything with a compatible ``request``)
        api_client: dict from get_api_client() with endpoint and headers
        query: GraphQL query string
        variables: Query variables
        description: Label used in log messages

    Returns:
        dict | None: Parsed result, or None when the body was empty or invalid
    """
    payload = build_graphql_payload(query, variables)
    body = client.request(
        "POST", api_client["endpoint"], payload, api_client["headers"]
    )
    logger.debug("Parsing %s response %d bytes", description, len(body))
    if not body:
        logger.warning("Empty %s response, skipping", description)
        return None
    try:
        result = json.loads(body)
    except ValueError as e:
        logger.warning("Error parsing %s result: %s", description, e)
        return None
    if not isinstance(result, dict):
        logger.warning("Unexpected %s result type: %s", description, type(result).__name__)
        return None
    return result
