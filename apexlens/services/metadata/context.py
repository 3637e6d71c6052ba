"""
Execution context detection.

Keyword and name signatures, checked in fixed precedence:
Batch > Integration > Scheduled > Async > Interactive > trigger fallback > Unknown.
"""

from collections.abc import Sequence

from apexlens.services.metadata.constants import (
    ASYNC_KEYWORDS,
    BATCH_KEYWORDS,
    CONTEXT_WINDOW,
    INTEGRATION_KEYWORDS,
    INTERACTIVE_KEYWORDS,
    LIMIT_USED_PATTERN,
    SCHEDULED_KEYWORDS,
)
from apexlens.services.metadata.types import ExecutionContext


def _mentions(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def detect_execution_context(
    header_lines: Sequence[str],
    code_unit_name: str = "",
    method_name: str = "",
) -> ExecutionContext:
    """
    Classify why a trace was produced.

    Args:
        header_lines: Leading lines of the log (only the first 500 are used;
            limit counter lines are ignored)
        code_unit_name: First code unit name, if any
        method_name: Method derived from the code unit, if any

    Returns:
        The first matching ExecutionContext
    """
    # Every limit dump lists "Number of queueable jobs added to the queue"
    text = " ".join(
        line for line in header_lines[:CONTEXT_WINDOW] if not LIMIT_USED_PATTERN.search(line)
    ).lower()
    code_unit = code_unit_name.lower()

    if _mentions(text, BATCH_KEYWORDS) or "batch" in code_unit:
        return ExecutionContext.BATCH

    if _mentions(text, INTEGRATION_KEYWORDS) or code_unit.startswith("rest:"):
        return ExecutionContext.INTEGRATION

    if _mentions(text, SCHEDULED_KEYWORDS) or "schedule" in code_unit:
        return ExecutionContext.SCHEDULED

    if _mentions(text, ASYNC_KEYWORDS) or "@future" in method_name:
        return ExecutionContext.ASYNC

    if _mentions(text, INTERACTIVE_KEYWORDS) or "controller" in code_unit or "lwc" in code_unit:
        return ExecutionContext.INTERACTIVE

    if "trigger" in code_unit:
        if "Batch" in code_unit_name or "Schedule" in code_unit_name:
            return ExecutionContext.ASYNC
        return ExecutionContext.INTERACTIVE

    return ExecutionContext.UNKNOWN
