"""
Constants for transaction grouping, phase detection and group recommendations.

Signature lists are case-insensitive substrings unless noted. They are
heuristics for attributing a log to backend or frontend work.
"""

# ─────────────────────────────────────────────────────────────
# Phase signatures
# ─────────────────────────────────────────────────────────────

BACKEND_PHASE_NAME = "Backend Processing"
FRONTEND_PHASE_NAME = "Component Rehydration"

BACKEND_CODE_UNIT_SIGNATURES = ("trigger", "flow", "process", "validation", "workflowrule")
# Case-sensitive
ASYNC_METHOD_SIGNATURES = ("@future", "Queueable")

FRONTEND_NAME_SIGNATURES = ("controller",)  # code unit or method
FRONTEND_CODE_UNIT_SIGNATURES = ("aura", "lwc")
AURA_ENABLED_SIGNATURE = "@AuraEnabled"  # case-sensitive, method name

TRIGGER_SIGNATURE = "trigger"

# ─────────────────────────────────────────────────────────────
# Timing thresholds (ms)
# ─────────────────────────────────────────────────────────────

SEQUENTIAL_GAP_MS = 50
SEQUENTIAL_SPREAD_MS = 100
PHASE_GAP_MS = 100

# ─────────────────────────────────────────────────────────────
# Recommendation thresholds
# ─────────────────────────────────────────────────────────────

BLOCKING_ASYNC_MS = 1000
NOTABLE_PHASE_GAP_MS = 500
GROUP_SOQL_THRESHOLD = 20
GROUP_CPU_THRESHOLD_MS = 5000
CRITICAL_DURATION_MS = 10_000
NOTICEABLE_DURATION_MS = 5000

# Record ids accepted by the free-text record id helper
TEXT_RECORD_ID_PREFIXES = ("001", "003", "005", "500", "006", "00Q", "01t", "a0")
