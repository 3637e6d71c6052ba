"""
Exception severity classification.

A thrown exception is classified by looking at what the log does next:

- FATAL_ERROR before anything else: the exception escaped (Unhandled)
- normal execution resumes (method entry/exit, statements, assignments,
  debug output): it was caught (Handled)
- another EXCEPTION_THROWN: possibly a re-throw chain, keep looking
- nothing conclusive within the window: Unhandled if the log has a fatal
  error anywhere, otherwise Warning

FATAL_ERROR nodes themselves are always Fatal. This is a bounded lookahead,
so deep re-throw chains or exceptions near the window edge can be
misclassified; that behaviour is kept as is.
"""

from apexlens.config import settings
from apexlens.services.parser.constants import (
    CONTINUATION_EVENTS,
    EXCEPTION_THROWN,
    FATAL_ERROR,
)
from apexlens.services.parser.types import (
    ExceptionRecord,
    ExceptionSeverity,
    ExecutionNode,
    LogLine,
    NodeType,
)


def classify_exception(
    lines: tuple[LogLine, ...] | list[LogLine],
    index: int,
    has_fatal_error: bool,
    lookahead: int,
) -> ExceptionSeverity:
    """
    Classify the EXCEPTION_THROWN at `lines[index]`.

    Args:
        lines: Tokenized log lines
        index: Position of the exception line in `lines`
        has_fatal_error: Whether the log contains any FATAL_ERROR
        lookahead: Number of following lines to inspect

    Returns:
        Handled, Unhandled or Warning
    """
    for line in lines[index + 1 : index + 1 + lookahead]:
        if line.event_type == FATAL_ERROR:
            return ExceptionSeverity.UNHANDLED
        if line.event_type in CONTINUATION_EVENTS:
            return ExceptionSeverity.HANDLED
        # EXCEPTION_THROWN (re-throw) and unrelated events: keep scanning

    return ExceptionSeverity.UNHANDLED if has_fatal_error else ExceptionSeverity.WARNING


def classify_exceptions(
    root: ExecutionNode,
    lines: tuple[LogLine, ...] | list[LogLine],
    lookahead: int | None = None,
) -> list[ExceptionRecord]:
    """
    Classify every exception node in the tree.

    Args:
        root: Root of the execution tree
        lines: Tokenized log lines the tree was built from
        lookahead: Lines to scan after each exception (defaults to settings)

    Returns:
        ExceptionRecords in tree (source) order
    """
    window = lookahead if lookahead is not None else settings.exception_lookahead_lines
    index_by_line = {line.line_number: i for i, line in enumerate(lines)}
    has_fatal_error = any(line.event_type == FATAL_ERROR for line in lines)

    records: list[ExceptionRecord] = []
    for node in root.walk():
        if node.type != NodeType.EXCEPTION:
            continue

        if node.metadata.get("fatal"):
            severity = ExceptionSeverity.FATAL
        else:
            index = index_by_line.get(node.start_line_number)
            if index is None or lines[index].event_type != EXCEPTION_THROWN:
                severity = ExceptionSeverity.UNHANDLED if has_fatal_error else ExceptionSeverity.WARNING
            else:
                severity = classify_exception(lines, index, has_fatal_error, window)

        records.append(
            ExceptionRecord(
                severity=severity,
                node=node,
                message=str(node.metadata.get("message", node.name)),
                exception_type=str(node.metadata.get("exception_type", "")),
                line_number=node.start_line_number,
            )
        )

    return records


def is_transaction_failed(records: list[ExceptionRecord]) -> bool:
    """A transaction failed when any exception is Fatal or Unhandled."""
    return any(record.is_failure for record in records)
