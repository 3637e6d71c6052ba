"""
Resource extraction: database operations, callouts and governor limits.

SOQL, DML and callouts each run an independent begin/end state machine.
Overlapping begins of the same kind are not modelled; a second begin replaces
the pending one. A begin whose end never arrives (truncated log) is dropped.
"""

import logging
from dataclasses import dataclass, field

from apexlens.config import settings
from apexlens.services.parser.constants import (
    AGGREGATIONS_PATTERN,
    CALLOUT_ENDPOINT_PATTERN,
    CALLOUT_METHOD_PATTERN,
    CALLOUT_REQUEST,
    CALLOUT_RESPONSE,
    CALLOUT_STATUS_CODE_PATTERN,
    CALLOUT_STATUS_PATTERN,
    DEFAULT_NAMESPACE,
    DML_BEGIN,
    DML_END,
    LIMIT_FIELD_RULES,
    LIMIT_LINE_PATTERN,
    LIMIT_USAGE_FOR_NS,
    LOG_LINE_PATTERN,
    ROWS_PATTERN,
    SOQL_EXECUTE_BEGIN,
    SOQL_EXECUTE_END,
)
from apexlens.services.parser.types import (
    CalloutOperation,
    DatabaseOperation,
    GovernorLimitSnapshot,
    LogLine,
    OperationKind,
    TokenizedLog,
    elapsed_ms,
)

logger = logging.getLogger(__name__)


@dataclass
class ResourceUsage:
    """Everything the resource extractor found in one log."""

    database_operations: list[DatabaseOperation] = field(default_factory=list)
    callouts: list[CalloutOperation] = field(default_factory=list)
    limit_snapshots: list[GovernorLimitSnapshot] = field(default_factory=list)
    namespace_limit_snapshots: list[GovernorLimitSnapshot] = field(default_factory=list)


def _int_field(pattern, text: str) -> int | None:
    match = pattern.search(text)
    return int(match.group(1)) if match else None


def _field_value(detail: str, prefix: str) -> str | None:
    if detail.startswith(prefix):
        return detail[len(prefix) :].strip()
    return None


def extract_database_operations(lines: tuple[LogLine, ...] | list[LogLine]) -> list[DatabaseOperation]:
    """
    Pair SOQL and DML begin/end events into DatabaseOperation records.

    Args:
        lines: Tokenized log lines

    Returns:
        Completed operations in order of their end events
    """
    operations: list[DatabaseOperation] = []
    pending: dict[OperationKind, tuple[DatabaseOperation, LogLine]] = {}

    for line in lines:
        event = line.event_type

        if event == SOQL_EXECUTE_BEGIN:
            op = DatabaseOperation(
                kind=OperationKind.SOQL,
                line_number=line.line_number,
                query=line.detail(2),
            )
            aggregations = _int_field(AGGREGATIONS_PATTERN, line.detail(1))
            if aggregations is not None:
                op.aggregation_count = aggregations
            pending[OperationKind.SOQL] = (op, line)

        elif event == SOQL_EXECUTE_END and OperationKind.SOQL in pending:
            op, begin = pending.pop(OperationKind.SOQL)
            rows = _int_field(ROWS_PATTERN, line.detail(1))
            if rows is not None:
                op.rows_affected = rows
            op.duration_ms = elapsed_ms(begin.timestamp, line.timestamp)
            operations.append(op)

        elif event == DML_BEGIN:
            op = DatabaseOperation(kind=OperationKind.DML, line_number=line.line_number)
            for detail in line.details:
                if (value := _field_value(detail, "Op:")) is not None:
                    op.dml_operation = value
                elif (value := _field_value(detail, "Type:")) is not None:
                    op.object_type = value
                elif (rows := _int_field(ROWS_PATTERN, detail)) is not None:
                    op.rows_affected = rows
            pending[OperationKind.DML] = (op, line)

        elif event == DML_END and OperationKind.DML in pending:
            op, begin = pending.pop(OperationKind.DML)
            op.duration_ms = elapsed_ms(begin.timestamp, line.timestamp)
            operations.append(op)

    return operations


def extract_callouts(lines: tuple[LogLine, ...] | list[LogLine]) -> list[CalloutOperation]:
    """Pair CALLOUT_REQUEST/CALLOUT_RESPONSE events."""
    callouts: list[CalloutOperation] = []
    pending: tuple[CalloutOperation, LogLine] | None = None

    for line in lines:
        if line.event_type == CALLOUT_REQUEST:
            text = "|".join(line.details)
            endpoint = CALLOUT_ENDPOINT_PATTERN.search(text)
            method = CALLOUT_METHOD_PATTERN.search(text)
            pending = (
                CalloutOperation(
                    line_number=line.line_number,
                    endpoint=endpoint.group(1) if endpoint else "",
                    method=method.group(1) if method else "",
                ),
                line,
            )
        elif line.event_type == CALLOUT_RESPONSE and pending is not None:
            callout, request = pending
            pending = None
            text = "|".join(line.details)
            callout.status_code = _int_field(CALLOUT_STATUS_CODE_PATTERN, text)
            status = CALLOUT_STATUS_PATTERN.search(text)
            callout.status = status.group(1).strip() if status else ""
            callout.duration_ms = elapsed_ms(request.timestamp, line.timestamp)
            callouts.append(callout)

    return callouts


def _apply_limit_line(snapshot: GovernorLimitSnapshot, text: str) -> bool:
    match = LIMIT_LINE_PATTERN.search(text)
    if not match:
        return False
    name = match.group("name").lower()
    for required, attr in LIMIT_FIELD_RULES:
        if all(word in name for word in required):
            setattr(snapshot, attr, int(match.group("used")))
            setattr(snapshot, f"{attr}_limit", int(match.group("limit")))
            return True
    return False


def read_limit_block(
    log: TokenizedLog,
    marker: LogLine,
    lookahead: int | None = None,
) -> GovernorLimitSnapshot:
    """
    Build a snapshot from the continuation lines after a LIMIT_USAGE_FOR_NS marker.

    Scans at most `lookahead` raw lines after the marker and stops at the next
    event line. Counters that never appear keep the platform defaults.
    """
    window = lookahead if lookahead is not None else settings.limit_lookahead_lines
    namespace = marker.detail(0, DEFAULT_NAMESPACE).strip() or DEFAULT_NAMESPACE
    snapshot = GovernorLimitSnapshot(line_number=marker.line_number, namespace=namespace)

    first = marker.line_number + 1
    for line_number in range(first, min(first + window, len(log.raw_lines) + 1)):
        raw = log.raw_line(line_number).strip()
        if LOG_LINE_PATTERN.match(raw):
            break
        _apply_limit_line(snapshot, raw)

    return snapshot


def extract_governor_limits(
    log: TokenizedLog,
    lookahead: int | None = None,
) -> tuple[list[GovernorLimitSnapshot], list[GovernorLimitSnapshot]]:
    """
    Extract governor limit snapshots.

    Returns:
        (default namespace snapshots, managed package namespace snapshots),
        each in order of appearance
    """
    default_snapshots: list[GovernorLimitSnapshot] = []
    namespace_snapshots: list[GovernorLimitSnapshot] = []

    for line in log.lines:
        if line.event_type != LIMIT_USAGE_FOR_NS:
            continue
        snapshot = read_limit_block(log, line, lookahead)
        if snapshot.namespace == DEFAULT_NAMESPACE:
            default_snapshots.append(snapshot)
        else:
            namespace_snapshots.append(snapshot)

    return default_snapshots, namespace_snapshots


def extract_resources(log: TokenizedLog, limit_lookahead: int | None = None) -> ResourceUsage:
    """Run every resource extractor over a tokenized log."""
    limit_snapshots, namespace_snapshots = extract_governor_limits(log, limit_lookahead)
    usage = ResourceUsage(
        database_operations=extract_database_operations(log.lines),
        callouts=extract_callouts(log.lines),
        limit_snapshots=limit_snapshots,
        namespace_limit_snapshots=namespace_snapshots,
    )
    logger.debug(
        f"Extracted {len(usage.database_operations)} DB operations, "
        f"{len(usage.callouts)} callouts, {len(usage.limit_snapshots)} limit snapshots"
    )
    return usage
