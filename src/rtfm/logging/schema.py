"""Field order per structured log event.

Every block starts with ``ts_utc``, ``level`` and, for fetch-related
events, ``document``; the fields below follow, then any others sorted.
"""

EVENT_KEY_ORDER: dict[str, tuple[str, ...]] = {
    "app_start": (
        "mode",
        "default_section",
        "config_file",
        "log_file",
        "cache_capacity",
        "debounce_ms",
        "fetch_timeout_sec",
    ),
    "app_stop": ("reason", "uptime_ms", "error_type", "error"),
    "index_built": ("command_count", "skipped", "elapsed_ms"),
    "duplicate_entry": ("command",),
    "fetch_joined": ("waiters",),
    "fetch_complete": ("line_count", "raw", "latency_ms"),
    "fetch_error": ("error_type", "error", "latency_ms"),
    "cache_evict": ("cache_size",),
    "fetch_discarded": ("active",),
    "session_start": ("command_count", "default_section", "auto_preview"),
    "session_error": ("event_type", "error_type", "error"),
    "session_stop": ("reason",),
}

LOG_PATH_FIELDS = frozenset({"config_file", "log_file"})
