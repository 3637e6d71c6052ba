"""
Constants for the fast metadata scanner.

Line windows are counted within the head sample (first N lines of the file)
except where noted. Context keyword lists are matched against the lowercased
header text; they are heuristics, not a platform contract.
"""

import re

# ─────────────────────────────────────────────────────────────
# Patterns
# ─────────────────────────────────────────────────────────────

USER_INFO_PATTERN = re.compile(r"USER_INFO\|\[EXTERNAL\]\|(\w+)\|([^|]+)\|")
CODE_UNIT_PATTERN = re.compile(r"CODE_UNIT_STARTED\|(.+)$")
EXECUTION_STARTED_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2}\.\d+)\s+\(\d+\)\|EXECUTION_STARTED")
EXECUTION_FINISHED_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2}\.\d+)\s+\(\d+\)\|EXECUTION_FINISHED")
FIRST_EVENT_TIME_PATTERN = re.compile(r"^(\d{2}:\d{2}:\d{2}\.\d+)\s+\(\d+\)\|")
ERROR_PATTERN = re.compile(r"EXCEPTION_THROWN|FATAL_ERROR")
LIMIT_USED_PATTERN = re.compile(r"(\d+)\s+out of")
RECORD_ID_PATTERN = re.compile(r"\b([a-zA-Z0-9]{15}|[a-zA-Z0-9]{18})\b")

LIMIT_MARKER = "LIMIT_USAGE_FOR_NS"
RECORD_ID_SOURCE_EVENTS = ("CODE_UNIT_STARTED", "USER_DEBUG")

# ─────────────────────────────────────────────────────────────
# Windows (lines)
# ─────────────────────────────────────────────────────────────

USER_WINDOW = 50
EXECUTION_STARTED_WINDOW = 100
CODE_UNIT_WINDOW = 200
RECORD_ID_WINDOW = 500
CONTEXT_WINDOW = 500
LIMIT_BLOCK_LINES = 20
SNIFF_LINES = 3

# ─────────────────────────────────────────────────────────────
# Limit counters: (substring in the limit line, TraceMetadata attribute)
# Checked in order; the first match wins for a line.
# ─────────────────────────────────────────────────────────────

LIMIT_COUNTER_RULES: list[tuple[str, str]] = [
    ("SOQL queries", "soql_queries"),
    ("query rows", "query_rows"),
    ("DML statements", "dml_statements"),
    ("DML rows", "dml_rows"),
    ("CPU time", "cpu_time"),
    ("heap size", "heap_size"),
]

# ─────────────────────────────────────────────────────────────
# Record ids
# ─────────────────────────────────────────────────────────────

# Common standard object key prefixes, plus custom objects (a0-a9)
RECORD_ID_PREFIXES: tuple[str, ...] = (
    "001", "003", "005", "006", "00Q", "00D", "00G", "00O", "00X",
    "500", "501", "800", "801",
    "01t", "01p", "01I", "01J", "01N", "01Z",
    "a0", "a1", "a2", "a3", "a4", "a5", "a6", "a7", "a8", "a9",
)

# ─────────────────────────────────────────────────────────────
# Directory scan
# ─────────────────────────────────────────────────────────────

LOG_EXTENSIONS = frozenset({".log", ".txt"})
LOG_ID_FILE_PREFIX = "07L"
HEADER_MARKERS: tuple[str, ...] = (
    "APEX_CODE",
    "Execute Anonymous",
    "USER_INFO",
    "EXECUTION_STARTED",
)
LOG_ID_STRIP_PREFIX = "apex-"

# ─────────────────────────────────────────────────────────────
# Execution context keywords (lowercase header text)
# ─────────────────────────────────────────────────────────────

BATCH_KEYWORDS = ("batchable", "database.batchable")
INTEGRATION_KEYWORDS = (
    "/services/apexrest/",
    "/services/soap/",
    "restcontext",
    "soaptype",
    "connected app",
)
SCHEDULED_KEYWORDS = ("schedulable", "scheduled flow", "time-based workflow")
ASYNC_KEYWORDS = ("@future", "queueable", "platform event")
INTERACTIVE_KEYWORDS = ("aura", "lightning", "@auraenabled")
