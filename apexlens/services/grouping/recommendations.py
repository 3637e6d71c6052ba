"""
Group recommendations.

A fixed-priority rule list; each rule appends its lines independently when its
condition holds. Standalone groups get none.
"""

from apexlens.services.grouping.constants import (
    BLOCKING_ASYNC_MS,
    CRITICAL_DURATION_MS,
    GROUP_CPU_THRESHOLD_MS,
    GROUP_SOQL_THRESHOLD,
    NOTABLE_PHASE_GAP_MS,
    NOTICEABLE_DURATION_MS,
)
from apexlens.services.grouping.patterns import distinct_contexts
from apexlens.services.grouping.phases import is_async_log
from apexlens.services.grouping.types import PhaseType, TransactionGroup
from apexlens.services.metadata.types import ExecutionContext

# (context pair, description, advice)
_CONTEXT_PAIR_ADVICE = [
    (
        {ExecutionContext.INTERACTIVE, ExecutionContext.BATCH},
        "Interactive UI actions AND Batch processing",
        "Recommendation: Create dedicated 'BatchUser' for batch jobs",
    ),
    (
        {ExecutionContext.INTERACTIVE, ExecutionContext.INTEGRATION},
        "Interactive UI actions AND API integrations",
        "Recommendation: Create dedicated integration user per external system",
    ),
    (
        {ExecutionContext.INTEGRATION, ExecutionContext.BATCH},
        "API integrations AND Batch processing",
        "Recommendation: Separate integration users from batch users",
    ),
]


def _mixed_context_lines(group: TransactionGroup) -> list[str]:
    contexts = distinct_contexts(group.logs)
    names = ", ".join(c.value for c in contexts)
    lines = [
        f"GOVERNANCE ISSUE: Mixed execution contexts detected ({names})",
        "This user account is being used for multiple purposes:",
    ]
    for pair, description, advice in _CONTEXT_PAIR_ADVICE:
        if pair.issubset(contexts):
            lines.append(f"  - {description}")
            lines.append(f"  - {advice}")
    lines.append("Impact: Hard to debug issues, logs are mixed, difficult to trace user actions")
    lines.append("Best Practice: One user per execution context (UI, Batch, Integration, Scheduled)")
    return lines


def generate_group_recommendations(group: TransactionGroup) -> list[str]:
    """
    Build recommendation text for a group.

    Args:
        group: A fully populated group (phases, patterns and aggregates set)

    Returns:
        Recommendation lines in priority order; empty for standalone groups
    """
    if group.is_standalone:
        return []

    recommendations: list[str] = []

    if group.has_mixed_contexts:
        recommendations.extend(_mixed_context_lines(group))

    for trigger, count in group.reentry_patterns.items():
        recommendations.append(
            f"{trigger} fired {count} times - add recursion control using static boolean or framework"
        )

    frontend = group.phase(PhaseType.FRONTEND)
    if frontend is not None and frontend.is_sequential_loading:
        recommendations.append(
            f"Components loading sequentially - optimize for parallel loading to save "
            f"{frontend.parallel_savings_ms:,.0f}ms"
        )
        recommendations.append("Use @wire with cacheable=true or load data in connectedCallback() simultaneously")

    backend = group.phase(PhaseType.BACKEND)
    if backend is not None and backend.has_async_operations:
        async_log = next((log for log in backend.logs if is_async_log(log)), None)
        if async_log is not None and async_log.duration_ms > BLOCKING_ASYNC_MS:
            recommendations.append(
                f"@future method took {async_log.duration_ms:,.0f}ms - consider true async pattern "
                f"or queueable with continuation"
            )

    if len(group.phases) > 1:
        gap_phase = next((p for p in group.phases if p.gap_to_next_phase_ms > NOTABLE_PHASE_GAP_MS), None)
        if gap_phase is not None:
            recommendations.append(
                f"{gap_phase.gap_to_next_phase_ms:,.0f}ms gap between {gap_phase.name} and next phase "
                f"- investigate page refresh delay"
            )

    if group.total_soql_queries > GROUP_SOQL_THRESHOLD:
        recommendations.append(
            f"{group.total_soql_queries} total SOQL queries across transaction "
            f"- look for N+1 patterns and consolidate queries"
        )

    if group.total_cpu_time > GROUP_CPU_THRESHOLD_MS:
        recommendations.append(
            f"{group.total_cpu_time}ms total CPU time - approaching limit, optimize loops and calculations"
        )

    seconds = group.total_duration_ms / 1000
    if group.total_duration_ms > CRITICAL_DURATION_MS:
        recommendations.append(
            f"Total user wait time: {seconds:.1f} seconds - CRITICAL: User experience severely impacted"
        )
        recommendations.append("Priority fixes: recursion control, parallel component loading, query optimization")
    elif group.total_duration_ms > NOTICEABLE_DURATION_MS:
        recommendations.append(f"Total user wait time: {seconds:.1f} seconds - Users will notice this delay")

    return recommendations
