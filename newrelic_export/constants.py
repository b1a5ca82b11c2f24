"""Constants used across the newrelic_export package."""

DEFAULT_GRAPHQL_URL = "https://api.newrelic.com/graphql"

# Number of parallel dashboard detail requestors
DEFAULT_MAX_WORKERS = 10

# Per-request timeout (seconds) and overall deadline for one run (0 disables)
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_RUN_TIMEOUT = 1800

DEFAULT_OUTPUT_DIR = "output"

# Retry policy for GraphQL requests: fixed delay, no backoff
MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 0.5
SUCCESS_STATUS_CODES = frozenset({200, 202})

# Export modes
MODE_PAGES = "pages"
MODE_SUMMARY = "summary"
EXPORT_MODES = (MODE_PAGES, MODE_SUMMARY)

# Tags requested on listed entities, per export mode
LISTING_TAGS = {
    MODE_PAGES: ("createdBy", "isDashboardPage"),
    MODE_SUMMARY: ("createdBy",),
}

# Upstream error message for deleted or inaccessible entities
NOT_FOUND_MESSAGE = "Not Found"

# Widget visualization slots holding NRQL queries, checked in this order.
# markdown has no queries and is intentionally absent.
WIDGET_QUERY_SLOTS = ("area", "bar", "billboard", "line", "pie", "table")

_NRQL_FIELDS = "nrqlQueries {accountId query}"

DASHBOARD_LIST_QUERY = (
    "query EntitySearchQuery($cursor: String) {actor {entitySearch("
    "query: \"domain = 'VIZ' AND type = 'DASHBOARD' AND accountId = %d\", "
    "options: {tagFilter: [%s]}) {results(cursor: $cursor) "
    "{entities {guid accountId name permalink tags {key values}} nextCursor}}}}"
)

DASHBOARD_DETAIL_QUERY = (
    "query getDashboard($guid: EntityGuid!) {actor {entity(guid: $guid) "
    "{... on DashboardEntity {name pages {name widgets {configuration {"
    + " ".join("%s {%s}" % (slot, _NRQL_FIELDS) for slot in WIDGET_QUERY_SLOTS)
    + " markdown {text}} id title} guid}}}}}"
)

PAGES_CSV_FIELDS = [
    "accountId",
    "guid",
    "name",
    "permalink",
    "createdBy",
    "chartId",
    "chartName",
    "nrqlAccountId",
    "nrqlQuery",
]

SUMMARY_CSV_FIELDS = PAGES_CSV_FIELDS[:5]
