"""Data fetching for New Relic dashboards.

Listing runs first in the calling thread. Dashboard details are then fetched
by a fixed pool of worker threads that read GUIDs from one queue and put
widgets on another. The calling thread is the only writer of the dashboard
map: it merges widgets as they arrive and stops after one WorkerDone marker
per worker.
"""

import logging
import queue
import threading
import time

from newrelic_export.client import RetryingClient, post_graphql
from newrelic_export.common import ExportTimeoutError, get_api_client
from newrelic_export.constants import DASHBOARD_DETAIL_QUERY
from newrelic_export.models import WorkerDone
from newrelic_export.process import fetch_dashboard_entities, process_dashboard_detail

logger = logging.getLogger(__name__)

# Input queue end-of-work marker, one per worker
_STOP = object()

# How often a blocked output put rechecks the stop event
_PUT_POLL_SECONDS = 0.1


def default_client_factory(api_client):
    """Return a factory building one RetryingClient per caller."""

    def factory():
        return RetryingClient(timeout=api_client.get("timeout"))

    return factory


def _feed_guids(input_queue, parent_guids, worker_count):
    for guid in parent_guids:
        input_queue.put(guid)
    for _ in range(worker_count):
        input_queue.put(_STOP)


def _put_until_stopped(output_queue, item, stop_event):
    """Put ``item`` on the output queue unless the run is stopped first.

    Returns:
        bool: False when ``stop_event`` was set before the item fitted
    """
    while not stop_event.is_set():
        try:
            output_queue.put(item, timeout=_PUT_POLL_SECONDS)
            return True
        except queue.Full:
            continue
    return False


def _detail_worker(
    worker_id, input_queue, output_queue, api_client, client_factory, stop_event
):
    """Fetch dashboard details until the end-of-work marker arrives.

    Finishes by putting one WorkerDone on the output queue. Once the stop
    event is set the worker drops pending widgets and exits without blocking.
    """
    processed = 0
    client = None
    try:
        client = client_factory()
        while True:
            guid = input_queue.get()
            if guid is _STOP or stop_event.is_set():
                break
            try:
                result = post_graphql(
                    client,
                    api_client,
                    DASHBOARD_DETAIL_QUERY,
                    {"guid": guid},
                    "dashboard detail",
                )
                if result is not None:
                    for widget in process_dashboard_detail(result, guid):
                        if not _put_until_stopped(output_queue, widget, stop_event):
                            break
            except Exception:
                logger.exception("Unexpected error fetching dashboard %s", guid)
            processed += 1
    finally:
        if client is not None:
            client.close()
        _put_until_stopped(
            output_queue,
            WorkerDone(worker_id=worker_id, processed=processed),
            stop_event,
        )


def merge_widget(dashboard_map, widget):
    """Merge one widget into its page record.

    A repeated id replaces the stored widget without adding to the id list.

    Returns:
        bool: True only when a new widget id was added to its page
    """
    dashboard = dashboard_map.get(widget.guid)
    if dashboard is None:
        logger.warning(
            "Error with dashboard detail, no match for guid %s (widget %d)",
            widget.guid,
            widget.id,
        )
        return False
    is_new = widget.id not in dashboard.widget_map
    if is_new:
        dashboard.widget_ids.append(widget.id)
    else:
        logger.debug("Widget %d repeated on page %s", widget.id, widget.guid)
    dashboard.widget_map[widget.id] = widget
    return is_new


def sort_widget_ids(dashboard_map):
    for dashboard in dashboard_map.values():
        dashboard.widget_ids.sort()


def aggregate_widgets(
    output_queue, dashboard_map, worker_count, deadline=None, stop_event=None
):
    """Drain the output queue into the dashboard map.

    Returns once ``worker_count`` WorkerDone markers have been seen, after
    sorting every dashboard's widget ids.

    Raises:
        ExportTimeoutError: when the deadline passes first; ``stop_event`` is
            set so workers stop taking new work
    """
    finished = 0
    merged = 0
    while finished < worker_count:
        timeout = None
        if deadline is not None:
            timeout = max(deadline - time.monotonic(), 0)
        try:
            item = output_queue.get(timeout=timeout)
        except queue.Empty:
            if stop_event is not None:
                stop_event.set()
            raise ExportTimeoutError(
                f"Run deadline passed with {worker_count - finished} of "
                f"{worker_count} detail workers still running"
            )

        if isinstance(item, WorkerDone):
            finished += 1
            logger.debug(
                "Detail worker %d finished after %d dashboard(s)",
                item.worker_id,
                item.processed,
            )
            continue
        if merge_widget(dashboard_map, item):
            merged += 1

    sort_widget_ids(dashboard_map)
    return merged


def fetch_dashboard_details(
    dashboard_map,
    parent_guids,
    api_client,
    max_workers,
    client_factory=None,
    deadline=None,
):
    """Fetch widgets for every parent dashboard with a fixed worker pool.

    Args:
        dashboard_map: Page records keyed by GUID, updated in place
        parent_guids: Dashboard GUIDs needing a detail request
        api_client: dict from get_api_client()
        max_workers: Pool size
        client_factory: Callable returning a fresh client per worker
        deadline: time.monotonic() value bounding the whole stage

    Returns:
        int: Number of distinct widgets merged

    Raises:
        ExportTimeoutError: when the deadline passes, after every worker
            thread has exited
    """
    if client_factory is None:
        client_factory = default_client_factory(api_client)

    input_queue = queue.Queue(maxsize=len(parent_guids) + max_workers)
    output_queue = queue.Queue(maxsize=len(parent_guids) + max_workers)
    stop_event = threading.Event()

    feeder = threading.Thread(
        target=_feed_guids,
        args=(input_queue, parent_guids, max_workers),
        name="detail-feeder",
        daemon=True,
    )
    feeder.start()

    logger.info("GraphQL - starting %d dashboard detail requestors", max_workers)
    workers = []
    for worker_id in range(1, max_workers + 1):
        worker = threading.Thread(
            target=_detail_worker,
            args=(
                worker_id,
                input_queue,
                output_queue,
                api_client,
                client_factory,
                stop_event,
            ),
            name=f"detail-worker-{worker_id}",
            daemon=True,
        )
        worker.start()
        workers.append(worker)

    try:
        widgets = aggregate_widgets(
            output_queue, dashboard_map, max_workers, deadline, stop_event
        )
    finally:
        # Workers check the stop event between requests and on a full queue
        stop_event.set()
        for worker in workers:
            worker.join()
        feeder.join()

    logger.info(
        "GraphQL - finished dashboard detail requestors, %d widgets found", widgets
    )
    return widgets


def fetch_all_dashboard_data(config, client_factory=None):
    """Run the full retrieval for one account.

    Returns:
        dict: dashboard_map, parent_guids and widget_count. The map is
            complete and its widget ids sorted.
    """
    start_time = time.time()
    api_client = get_api_client(config=config)
    if client_factory is None:
        client_factory = default_client_factory(api_client)

    deadline = None
    if config.RUN_TIMEOUT and config.RUN_TIMEOUT > 0:
        deadline = time.monotonic() + config.RUN_TIMEOUT

    logger.info("Listing dashboards for account %s...", config.ACCOUNT_ID)
    listing_client = client_factory()
    try:
        dashboard_map, parent_guids = fetch_dashboard_entities(
            listing_client, api_client, config.EXPORT_MODE, deadline
        )
    finally:
        listing_client.close()
    listing_duration = time.time() - start_time
    logger.info("Dashboard listing completed in %.2f seconds", listing_duration)

    widget_count = fetch_dashboard_details(
        dashboard_map,
        parent_guids,
        api_client,
        config.MAX_WORKERS,
        client_factory=client_factory,
        deadline=deadline,
    )

    total_duration = time.time() - start_time
    logger.info(
        "Dashboard detail fetch completed in %.2f seconds",
        total_duration - listing_duration,
    )
    return {
        "dashboard_map": dashboard_map,
        "parent_guids": parent_guids,
        "widget_count": widget_count,
    }
