"""
Parser constants: compiled patterns, event names and heuristic tables.

Patterns are compiled once at import and shared read-only by every call.
The frames-per-call table and the thresholds below are heuristics kept for
stable behaviour; none of them is a measured platform value.
"""

import re

# ─────────────────────────────────────────────────────────────
# Line grammar
# ─────────────────────────────────────────────────────────────

# HH:MM:SS.fff (ticks)|EVENT_TYPE|field1|field2|...
LOG_LINE_PATTERN = re.compile(
    r"^(?P<time>\d{2}:\d{2}:\d{2}\.\d+)\s+\((?P<ticks>\d+)\)\|(?P<event>[A-Z_]+)(?:\|(?P<rest>.*))?$"
)

# Governor limit continuation lines ("  Number of SOQL queries: 1 out of 100")
LIMIT_LINE_PATTERN = re.compile(
    r"(?:Number of|Maximum) (?P<name>\w+(?:\s+\w+)*?):\s*(?P<used>\d+)\s+out of\s+(?P<limit>\d+)"
)

ROWS_PATTERN = re.compile(r"^Rows:(\d+)")
AGGREGATIONS_PATTERN = re.compile(r"^Aggregations:(\d+)")
CALLOUT_ENDPOINT_PATTERN = re.compile(r"Endpoint=([^,\]\s]+)")
CALLOUT_METHOD_PATTERN = re.compile(r"Method=(\w+)")
CALLOUT_STATUS_CODE_PATTERN = re.compile(r"StatusCode=(\d+)")
CALLOUT_STATUS_PATTERN = re.compile(r"Status=([^,\]]+)")

# X on Y trigger event Z
TRIGGER_NAME_PATTERN = re.compile(r"^(?P<trigger>\S+) on (?P<object>\S+) trigger event (?P<event>\w+)")

# 15/18-character record ids used as a leading CODE_UNIT_STARTED field
RECORD_ID_FIELD_PATTERN = re.compile(r"^[a-zA-Z0-9]{15}(?:[a-zA-Z0-9]{3})?$")

# SOQL literal normalization for N+1 detection
STRING_LITERAL_PATTERN = re.compile(r"'[^']*'")
DIGITS_PATTERN = re.compile(r"\d+")

MAX_VERBOSITY_PATTERN = re.compile(r"APEX_CODE,FINEST")
TRUNCATION_MARKER = "MAXIMUM DEBUG LOG SIZE REACHED"
EXTERNAL_MARKER = "[EXTERNAL]"

# ─────────────────────────────────────────────────────────────
# Event types
# ─────────────────────────────────────────────────────────────

CODE_UNIT_STARTED = "CODE_UNIT_STARTED"
CODE_UNIT_FINISHED = "CODE_UNIT_FINISHED"
METHOD_ENTRY = "METHOD_ENTRY"
METHOD_EXIT = "METHOD_EXIT"
CONSTRUCTOR_ENTRY = "CONSTRUCTOR_ENTRY"
CONSTRUCTOR_EXIT = "CONSTRUCTOR_EXIT"
SYSTEM_METHOD_ENTRY = "SYSTEM_METHOD_ENTRY"
SYSTEM_METHOD_EXIT = "SYSTEM_METHOD_EXIT"
USER_DEBUG = "USER_DEBUG"
EXCEPTION_THROWN = "EXCEPTION_THROWN"
FATAL_ERROR = "FATAL_ERROR"
STATEMENT_EXECUTE = "STATEMENT_EXECUTE"
VARIABLE_ASSIGNMENT = "VARIABLE_ASSIGNMENT"
SOQL_EXECUTE_BEGIN = "SOQL_EXECUTE_BEGIN"
SOQL_EXECUTE_END = "SOQL_EXECUTE_END"
DML_BEGIN = "DML_BEGIN"
DML_END = "DML_END"
CALLOUT_REQUEST = "CALLOUT_REQUEST"
CALLOUT_RESPONSE = "CALLOUT_RESPONSE"
CUMULATIVE_LIMIT_USAGE = "CUMULATIVE_LIMIT_USAGE"
LIMIT_USAGE_FOR_NS = "LIMIT_USAGE_FOR_NS"
USER_INFO = "USER_INFO"
DEFAULT_NAMESPACE = "(default)"

# Exception lookahead: events that mean execution carried on normally
CONTINUATION_EVENTS = frozenset(
    {METHOD_ENTRY, METHOD_EXIT, STATEMENT_EXECUTE, VARIABLE_ASSIGNMENT, USER_DEBUG}
)

# Stack depth pass: entry event -> matching exit event
DEPTH_ENTRY_EVENTS = {
    CODE_UNIT_STARTED: CODE_UNIT_FINISHED,
    METHOD_ENTRY: METHOD_EXIT,
    CONSTRUCTOR_ENTRY: CONSTRUCTOR_EXIT,
}
DEPTH_EXIT_EVENTS = frozenset(DEPTH_ENTRY_EVENTS.values())

# ─────────────────────────────────────────────────────────────
# Governor limit name matching (lower-cased limit text)
# ─────────────────────────────────────────────────────────────

# (required substrings, snapshot field); first match wins
LIMIT_FIELD_RULES: list[tuple[tuple[str, ...], str]] = [
    (("soql", "queries"), "soql_queries"),
    (("query", "rows"), "query_rows"),
    (("cpu",), "cpu_time"),
    (("heap",), "heap_size"),
    (("dml", "statements"), "dml_statements"),
    (("dml", "rows"), "dml_rows"),
    (("callouts",), "callouts"),
]

# ─────────────────────────────────────────────────────────────
# Stack depth heuristics
# ─────────────────────────────────────────────────────────────

# Salesforce documents a 1,000 frame Apex call stack ceiling
STACK_FRAME_CEILING = 1000
RISK_CRITICAL_FRAMES = 800
RISK_WARNING_FRAMES = 600
RISK_MODERATE_FRAMES = 300

# (case-insensitive name substring, estimated frames per call); first match wins.
# Dispatch-style classes route through several layers per call.
FRAMES_PER_CALL_RULES: list[tuple[str, int]] = [
    ("triggerhandler", 4),
    ("dispatcher", 4),
    ("dispatch", 3),
    ("handler", 3),
    ("service", 2),
    ("selector", 2),
    ("domain", 2),
]
DEFAULT_FRAMES_PER_CALL = 1

# Debug logging at FINEST adds roughly one frame per ten entries
DEBUG_OVERHEAD_DIVISOR = 10

# ─────────────────────────────────────────────────────────────
# Diagnostics thresholds
# ─────────────────────────────────────────────────────────────

SOQL_HIGH_COUNT = 50
SOQL_MODERATE_COUNT = 20
N_PLUS_ONE_MIN_SOQL = 10
N_PLUS_ONE_MIN_REPEATS = 5
SLOW_OPERATION_MS = 1000
TRIGGER_RECURSION_CALLS = 2
FREQUENT_METHOD_CALLS = 10
DB_TIME_DOMINANT_PERCENT = 70
GOOD_PERFORMANCE_MAX_MS = 5000
