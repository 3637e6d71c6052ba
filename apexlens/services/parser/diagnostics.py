"""
Summary, issue and recommendation text for a single trace.

These strings are a small templated layer over the structured analysis;
presentation code is free to re-render or ignore them.
"""

from collections import defaultdict

from apexlens.services.parser.constants import (
    DB_TIME_DOMINANT_PERCENT,
    DIGITS_PATTERN,
    FREQUENT_METHOD_CALLS,
    GOOD_PERFORMANCE_MAX_MS,
    N_PLUS_ONE_MIN_REPEATS,
    N_PLUS_ONE_MIN_SOQL,
    SLOW_OPERATION_MS,
    SOQL_HIGH_COUNT,
    SOQL_MODERATE_COUNT,
    STACK_FRAME_CEILING,
    STRING_LITERAL_PATTERN,
    TRIGGER_RECURSION_CALLS,
)
from apexlens.services.parser.types import (
    DatabaseOperation,
    DuplicateQuery,
    LimitTier,
    RiskLevel,
    TraceAnalysis,
    percent_tier,
)

_NEAR_LIMIT_TIERS = (LimitTier.HIGH, LimitTier.CRITICAL)
_STACK_RISK_LEVELS = (RiskLevel.WARNING, RiskLevel.CRITICAL)


def normalize_query(query: str) -> str:
    """Replace string and numeric literals so similar queries share one shape."""
    query = STRING_LITERAL_PATTERN.sub("'?'", query)
    return DIGITS_PATTERN.sub("?", query).strip()


def find_duplicate_queries(soql_operations: list[DatabaseOperation]) -> list[DuplicateQuery]:
    """
    Group SOQL executions by normalized shape.

    Returns:
        Shapes executed more than once, most executed first
    """
    by_shape: dict[str, list[DatabaseOperation]] = defaultdict(list)
    for op in soql_operations:
        by_shape[normalize_query(op.query)].append(op)

    duplicates = [
        DuplicateQuery(
            shape=shape,
            execution_count=len(ops),
            example_query=ops[0].query,
            total_rows=sum(op.rows_affected for op in ops),
            total_duration_ms=sum(op.duration_ms for op in ops),
        )
        for shape, ops in by_shape.items()
        if len(ops) > 1
    ]
    duplicates.sort(key=lambda d: d.execution_count, reverse=True)
    return duplicates


def has_n_plus_one_pattern(analysis: TraceAnalysis) -> bool:
    """More than 10 queries with at least one shape repeated more than 5 times."""
    if len(analysis.soql_operations) <= N_PLUS_ONE_MIN_SOQL:
        return False
    return any(d.execution_count > N_PLUS_ONE_MIN_REPEATS for d in analysis.duplicate_queries)


def generate_summary(analysis: TraceAnalysis) -> str:
    method_count = len(analysis.method_stats)
    soql_count = len(analysis.soql_operations)
    dml_count = len(analysis.dml_operations)
    error_count = len(analysis.errors)

    parts = [f"Execution completed in {analysis.duration_ms:.0f}ms."]
    if method_count:
        parts.append(f"Executed {method_count} unique method(s).")
    if soql_count and dml_count:
        parts.append(f"Performed {soql_count} SOQL query(ies) and {dml_count} DML operation(s).")
    elif soql_count:
        parts.append(f"Performed {soql_count} SOQL query(ies).")
    elif dml_count:
        parts.append(f"Performed {dml_count} DML operation(s).")

    if error_count:
        parts.append(f"Encountered {error_count} error(s).")
    else:
        parts.append("No errors detected.")
    return " ".join(parts)


def detect_issues(analysis: TraceAnalysis) -> list[str]:
    issues: list[str] = []
    soql_count = len(analysis.soql_operations)

    if soql_count > SOQL_HIGH_COUNT:
        issues.append(f"High number of SOQL queries: {soql_count} (consider bulkification)")
    elif soql_count > SOQL_MODERATE_COUNT:
        issues.append(f"Moderate SOQL usage: {soql_count} queries (review for optimization opportunities)")

    slow = [op for op in analysis.database_operations if op.duration_ms > SLOW_OPERATION_MS]
    if slow:
        issues.append(
            f"Found {len(slow)} slow database operation(s) (>{SLOW_OPERATION_MS}ms) - review indexes and selectivity"
        )

    if has_n_plus_one_pattern(analysis):
        repeated = [d for d in analysis.duplicate_queries if d.execution_count > N_PLUS_ONE_MIN_REPEATS]
        issues.append(
            f"Possible N+1 query pattern detected - {len(repeated)} query type(s) executed multiple times"
        )

    limits = analysis.last_limit_snapshot
    if limits is not None:
        percentages = limits.percentages()
        if percent_tier(percentages["soql_queries"]) in _NEAR_LIMIT_TIERS:
            issues.append(
                f"SOQL queries near limit: {limits.soql_queries}/{limits.soql_queries_limit} "
                f"({percentages['soql_queries']:.0f}%)"
            )
        if percent_tier(percentages["cpu_time"]) in _NEAR_LIMIT_TIERS:
            issues.append(
                f"CPU time near limit: {limits.cpu_time}/{limits.cpu_time_limit}ms "
                f"({percentages['cpu_time']:.0f}%)"
            )
        if percent_tier(percentages["heap_size"]) in _NEAR_LIMIT_TIERS:
            issues.append(
                f"Heap size near limit: {limits.heap_size}/{limits.heap_size_limit} bytes "
                f"({percentages['heap_size']:.0f}%)"
            )

    recursive = [
        name
        for name, stat in analysis.method_stats.items()
        if stat.call_count > TRIGGER_RECURSION_CALLS and "trigger" in name.lower()
    ]
    if recursive:
        issues.append(f"Possible recursive trigger: {', '.join(recursive)} called multiple times")

    if analysis.stack_depth.risk_level in _STACK_RISK_LEVELS:
        issues.append(
            f"Stack depth risk {analysis.stack_depth.risk_level.value}: an estimated "
            f"{analysis.stack_depth.estimated_total_frames} frames against a {STACK_FRAME_CEILING} frame ceiling"
        )

    if analysis.transaction_failed:
        issues.append(f"Execution failed with {len(analysis.errors)} error(s) - review exception details")

    return issues


def generate_recommendations(analysis: TraceAnalysis) -> list[str]:
    recommendations: list[str] = []
    soql_count = len(analysis.soql_operations)

    if SOQL_MODERATE_COUNT < soql_count <= SOQL_HIGH_COUNT:
        recommendations.append("Consider using bulkified patterns to reduce SOQL queries")

    frequent = sorted(
        (s for s in analysis.method_stats.values() if s.call_count > FREQUENT_METHOD_CALLS),
        key=lambda s: s.call_count,
        reverse=True,
    )[:3]
    for stat in frequent:
        recommendations.append(
            f"Method '{stat.method_name}' called {stat.call_count} times - consider caching or refactoring"
        )

    total_db_time = sum(op.duration_ms for op in analysis.database_operations)
    if total_db_time > 0 and analysis.duration_ms > 0:
        db_percent = total_db_time * 100.0 / analysis.duration_ms
        if db_percent > DB_TIME_DOMINANT_PERCENT:
            recommendations.append(
                f"Database operations account for {db_percent:.0f}% of execution time - focus optimization here"
            )

    if any("limit" not in op.query.lower() for op in analysis.soql_operations):
        recommendations.append("Some SOQL queries don't have LIMIT clauses - consider adding limits for safety")

    depth = analysis.stack_depth
    if depth.risk_level in _STACK_RISK_LEVELS:
        if depth.loop_patterns:
            top = depth.loop_patterns[0]
            recommendations.append(
                f"'{top.method_name}' ran {top.call_count} times - move work out of loops or add a recursion guard"
            )
        else:
            recommendations.append(
                f"Call stack reached depth {depth.max_depth} at '{depth.method_at_max_depth}' "
                f"- flatten nested calls to stay clear of the stack limit"
            )

    if not analysis.exceptions and soql_count < SOQL_MODERATE_COUNT and analysis.duration_ms < GOOD_PERFORMANCE_MAX_MS:
        recommendations.append("Good performance! Execution is efficient and within best practices")

    return recommendations
