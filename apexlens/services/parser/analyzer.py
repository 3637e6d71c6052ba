"""
Single-trace analysis.

LogParserService wires the parser passes together:

    tokenize -> build tree -> extract resources -> classify exceptions
             -> stack depth -> method statistics -> diagnostics

Every call builds its own result graph. Nothing is cached on the service.
"""

import logging

from apexlens.services.parser.constants import (
    CODE_UNIT_STARTED,
    CUMULATIVE_LIMIT_USAGE,
    TRUNCATION_MARKER,
    USER_INFO,
)
from apexlens.services.parser.diagnostics import (
    detect_issues,
    find_duplicate_queries,
    generate_recommendations,
    generate_summary,
)
from apexlens.services.parser.exception_classifier import (
    classify_exceptions,
    is_transaction_failed,
)
from apexlens.services.parser.names import clean_code_unit_name, format_entry_point
from apexlens.services.parser.resources import extract_resources
from apexlens.services.parser.stack_depth import analyze_stack_depth
from apexlens.services.parser.statistics import calculate_method_statistics
from apexlens.services.parser.tokenizer import tokenize
from apexlens.services.parser.tree_builder import build_execution_tree
from apexlens.services.parser.types import LogLine, TokenizedLog, TraceAnalysis, elapsed_ms

logger = logging.getLogger(__name__)

EMPTY_LOG_SUMMARY = "Empty log file"
NO_VALID_LINES_SUMMARY = "No valid log lines found"


def compute_duration_ms(lines: tuple[LogLine, ...] | list[LogLine]) -> float:
    """
    Transaction duration from first to last event.

    Uses the nanosecond tick counter when it moves forward, since it survives
    midnight; otherwise falls back to the time-of-day difference.
    """
    if len(lines) < 2:
        return 0.0
    first, last = lines[0], lines[-1]
    if last.ticks > first.ticks:
        return (last.ticks - first.ticks) / 1_000_000
    return max(0.0, elapsed_ms(first.timestamp, last.timestamp))


def find_entry_point(lines: tuple[LogLine, ...] | list[LogLine]) -> str:
    """Readable name of the first code unit, or "" when the log has none."""
    for line in lines:
        if line.event_type == CODE_UNIT_STARTED:
            return format_entry_point(clean_code_unit_name(line.details))
    return ""


def find_log_user(lines: tuple[LogLine, ...] | list[LogLine]) -> str:
    for line in lines:
        if line.event_type == USER_INFO:
            name = clean_code_unit_name(line.details)
            return "" if name == "Unknown" else name
    return ""


def is_truncated(log: TokenizedLog) -> bool:
    """A log is truncated when the platform says so or the final limit dump is missing."""
    if any(TRUNCATION_MARKER in raw for raw in log.raw_lines):
        return True
    return not any(line.event_type == CUMULATIVE_LIMIT_USAGE for line in log.lines)


class LogParserService:
    """Parses one debug log into a TraceAnalysis."""

    def __init__(
        self,
        exception_lookahead: int | None = None,
        limit_lookahead: int | None = None,
        loop_threshold: int | None = None,
    ):
        """
        Args:
            exception_lookahead: Lines scanned after each exception (defaults to settings)
            limit_lookahead: Lines scanned after each limit marker (defaults to settings)
            loop_threshold: Calls above which a method is a loop pattern (defaults to settings)
        """
        self.exception_lookahead = exception_lookahead
        self.limit_lookahead = limit_lookahead
        self.loop_threshold = loop_threshold

    def parse(self, content: str, log_id: str = "") -> TraceAnalysis:
        """
        Analyze a complete debug log. Never raises.

        Args:
            content: Raw log text
            log_id: Identifier carried onto the result

        Returns:
            TraceAnalysis; empty or unparseable input yields a minimal
            analysis whose summary says why
        """
        if not content or not content.strip():
            return TraceAnalysis(log_id=log_id, summary=EMPTY_LOG_SUMMARY)

        try:
            return self._analyze(content, log_id)
        except Exception as e:
            logger.error(f"Failed to analyze log {log_id or '<unnamed>'}: {e}", exc_info=True)
            return TraceAnalysis(log_id=log_id, summary=f"Analysis failed: {e}")

    def _analyze(self, content: str, log_id: str) -> TraceAnalysis:
        log = tokenize(content)
        if log.is_empty:
            return TraceAnalysis(
                log_id=log_id,
                line_count=len(log.raw_lines),
                summary=NO_VALID_LINES_SUMMARY,
            )

        tree = build_execution_tree(log.lines)
        if tree.skipped_lines:
            logger.debug(f"Tree builder skipped {tree.skipped_lines} line(s) in {log_id or '<unnamed>'}")

        resources = extract_resources(log, self.limit_lookahead)
        exceptions = classify_exceptions(tree.root, log.lines, self.exception_lookahead)

        analysis = TraceAnalysis(
            log_id=log_id,
            line_count=len(log.raw_lines),
            root_node=tree.root,
            entry_point=find_entry_point(log.lines),
            log_user=find_log_user(log.lines),
            duration_ms=compute_duration_ms(log.lines),
            wall_clock_ms=tree.root.duration_ms,
            database_operations=resources.database_operations,
            callouts=resources.callouts,
            limit_snapshots=resources.limit_snapshots,
            namespace_limit_snapshots=resources.namespace_limit_snapshots,
            exceptions=exceptions,
            method_stats=calculate_method_statistics(tree.root),
            stack_depth=analyze_stack_depth(log.lines, log.header_lines, self.loop_threshold),
            transaction_failed=is_transaction_failed(exceptions),
            is_log_truncated=is_truncated(log),
        )
        analysis.duplicate_queries = find_duplicate_queries(analysis.soql_operations)
        analysis.summary = generate_summary(analysis)
        analysis.issues = detect_issues(analysis)
        analysis.recommendations = generate_recommendations(analysis)

        logger.debug(
            f"Analyzed {log_id or '<unnamed>'}: {len(log.lines)} events, "
            f"{len(analysis.database_operations)} DB ops, {len(exceptions)} exception(s)"
        )
        return analysis


def parse_log(content: str, log_id: str = "") -> TraceAnalysis:
    """Analyze a log with default settings."""
    return LogParserService().parse(content, log_id)
