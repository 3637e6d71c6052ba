"""Group-level pattern detection: trigger re-entry and mixed execution contexts."""

from collections import Counter

from apexlens.services.grouping.constants import TRIGGER_SIGNATURE
from apexlens.services.metadata.types import ExecutionContext, TraceMetadata


def detect_reentry(logs: list[TraceMetadata]) -> tuple[dict[str, int], int]:
    """
    Find triggers that fired more than once in a group.

    Returns:
        (trigger name -> fire count for names seen more than once,
         total re-entries, i.e. the sum of count - 1)
    """
    counts = Counter(
        log.code_unit_name for log in logs if TRIGGER_SIGNATURE in log.code_unit_name.lower()
    )
    patterns = {name: count for name, count in counts.items() if count > 1}
    return patterns, sum(count - 1 for count in patterns.values())


def distinct_contexts(logs: list[TraceMetadata]) -> list[ExecutionContext]:
    """Distinct non-Unknown contexts in first-seen order."""
    seen: list[ExecutionContext] = []
    for log in logs:
        if log.context != ExecutionContext.UNKNOWN and log.context not in seen:
            seen.append(log.context)
    return seen


def detect_mixed_contexts(logs: list[TraceMetadata]) -> tuple[bool, ExecutionContext]:
    """
    Flag groups whose members ran under more than one execution context.

    Returns:
        (mixed flag, primary context). The primary context is the most common
        non-Unknown context (first seen wins ties), or Unknown when none.
    """
    contexts = distinct_contexts(logs)
    if not contexts:
        return False, ExecutionContext.UNKNOWN

    # Counter preserves insertion order, and most_common is stable
    counts = Counter(log.context for log in logs if log.context != ExecutionContext.UNKNOWN)
    primary = counts.most_common(1)[0][0]
    return len(contexts) > 1, primary
