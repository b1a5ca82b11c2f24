"""Cleaned-up records built from NerdGraph responses."""

from dataclasses import dataclass, field


@dataclass
class NrqlQuery:
    account_id: int
    query: str


@dataclass
class Widget:
    """A dashboard widget with the NRQL queries it displays.

    ``guid`` is the GUID of the dashboard page the widget belongs to.
    """

    id: int
    title: str
    guid: str = ""
    nrql_queries: list[NrqlQuery] = field(default_factory=list)


@dataclass
class Dashboard:
    """A listed dashboard entity.

    Page records collect their widgets in ``widget_map``; ``widget_ids`` is
    the sorted projection of its keys once aggregation has finished.
    """

    account_id: int
    guid: str
    name: str = ""
    permalink: str = ""
    created_by: str = ""
    is_page: bool = False
    widget_map: dict[int, Widget] = field(default_factory=dict)
    widget_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class WorkerDone:
    """Completion marker a detail worker puts on the output queue when it stops."""

    worker_id: int
    processed: int = 0
