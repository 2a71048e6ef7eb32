"""Application constants."""

USER_AGENT = "asset-discovery/0.3 (+infrastructure; contact: configured-email)"
DEFAULT_OVERPASS_ENDPOINT = "https://overpass-api.de/api/interpreter"
DEFAULT_HTTP_TIMEOUT = "60s"
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = "2s"
DEFAULT_QUERY_TIMEOUT_SECONDS = 60
CONFIG_FILENAME = "asset_discovery.yml"
ENV_OVERRIDES = {
    "OVERPASS_API_URL": ("overpass", "endpoint"),
    "HTTP_TIMEOUT": ("http", "timeout"),
    "MAX_RETRIES": ("http", "max_retries"),
    "RETRY_DELAY": ("http", "retry_delay"),
}
PROVENANCE_ID_FIELD = "osm_id"
PROVENANCE_TYPE_FIELD = "osm_type"
COMMANDS = ("discover", "query")
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 2
EXIT_UPSTREAM_UNAVAILABLE = 3
EXIT_CANCELLED = 4
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "request_id",
    "stage",
    "source",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "elements_in",
    "assets_out",
    "error_code",
    "message",
)
