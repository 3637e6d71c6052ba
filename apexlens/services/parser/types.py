"""
Data types for single-trace analysis.

LogLine is frozen once tokenized. The remaining dataclasses are assembled by
the parser during one call and handed to the caller; nothing here is cached
or shared between calls.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

_ONE_MS = timedelta(milliseconds=1)


def elapsed_ms(start: timedelta, end: timedelta) -> float:
    """Milliseconds between two time-of-day offsets."""
    return (end - start) / _ONE_MS


@dataclass(frozen=True)
class LogLine:
    """A single tokenized debug log event."""

    timestamp: timedelta  # Time of day; the log carries no date
    timestamp_text: str  # Original "HH:MM:SS.fff" text
    ticks: int  # Nanoseconds since the start of the request
    event_type: str
    details: tuple[str, ...]
    line_number: int  # 1-based source line

    def detail(self, index: int, default: str = "") -> str:
        """Return detail field `index`, or `default` when absent."""
        if -len(self.details) <= index < len(self.details):
            return self.details[index]
        return default

    def render(self) -> str:
        """Re-derive the source line from the tokenized fields."""
        head = f"{self.timestamp_text} ({self.ticks})|{self.event_type}"
        if not self.details:
            return head
        return head + "|" + "|".join(self.details)


@dataclass(frozen=True)
class TokenizedLog:
    """Tokenizer output."""

    lines: tuple[LogLine, ...]
    header_lines: tuple[str, ...]  # Non-event lines before the first event
    raw_lines: tuple[str, ...]  # Every source line, index = line_number - 1

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def raw_line(self, line_number: int) -> str:
        if 1 <= line_number <= len(self.raw_lines):
            return self.raw_lines[line_number - 1]
        return ""


class NodeType(str, Enum):
    ROOT = "Root"
    CODE_UNIT = "CodeUnit"
    METHOD = "Method"
    SYSTEM_METHOD = "SystemMethod"
    USER_DEBUG = "UserDebug"
    EXCEPTION = "Exception"


@dataclass
class ExecutionNode:
    """A node in the reconstructed call tree."""

    name: str
    type: NodeType
    start_time: timedelta
    start_line_number: int = 0
    end_time: timedelta | None = None
    end_line_number: int | None = None
    children: list["ExecutionNode"] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return elapsed_ms(self.start_time, self.end_time)

    def walk(self):
        """Yield this node and all descendants, depth-first, in order."""
        pending = [self]
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(node.children))


class OperationKind(str, Enum):
    SOQL = "SOQL"
    DML = "DML"


@dataclass
class DatabaseOperation:
    """A completed SOQL query or DML statement."""

    kind: OperationKind
    line_number: int
    query: str = ""
    dml_operation: str = ""  # Insert, Update, Delete, Undelete, Upsert
    object_type: str = ""
    rows_affected: int = 0
    aggregation_count: int = 0
    duration_ms: float = 0.0

    @property
    def is_custom_metadata(self) -> bool:
        """SOQL against a custom metadata type (does not count against limits)."""
        return self.kind == OperationKind.SOQL and "__mdt" in self.query.lower()


@dataclass
class CalloutOperation:
    """An outbound HTTP callout (request and its response)."""

    line_number: int
    endpoint: str = ""
    method: str = ""
    status_code: int | None = None
    status: str = ""
    duration_ms: float = 0.0

    @property
    def is_error(self) -> bool:
        return self.status_code is None or self.status_code >= 400


class LimitTier(str, Enum):
    """Usage tiers for a single governor limit, lowest first."""

    HEALTHY = "Healthy"  # < 50%
    ELEVATED = "Elevated"  # 50% - 80%
    HIGH = "High"  # 80% - 95%
    CRITICAL = "Critical"  # >= 95%


def usage_percent(used: int, limit: int) -> float:
    if limit <= 0:
        return 0.0
    return used * 100.0 / limit


def limit_tier(used: int, limit: int) -> LimitTier:
    """Tier a single counter. Non-decreasing in `used` for a fixed `limit`."""
    return percent_tier(usage_percent(used, limit))


def percent_tier(percent: float) -> LimitTier:
    if percent >= 95:
        return LimitTier.CRITICAL
    if percent >= 80:
        return LimitTier.HIGH
    if percent >= 50:
        return LimitTier.ELEVATED
    return LimitTier.HEALTHY


@dataclass
class GovernorLimitSnapshot:
    """Governor limit usage for one namespace at one checkpoint."""

    line_number: int
    namespace: str = "(default)"
    soql_queries: int = 0
    soql_queries_limit: int = 100
    query_rows: int = 0
    query_rows_limit: int = 50_000
    cpu_time: int = 0
    cpu_time_limit: int = 10_000
    heap_size: int = 0
    heap_size_limit: int = 6_000_000
    dml_statements: int = 0
    dml_statements_limit: int = 150
    dml_rows: int = 0
    dml_rows_limit: int = 10_000
    callouts: int = 0
    callouts_limit: int = 100

    def percentages(self) -> dict[str, float]:
        """Usage percentage per counter."""
        return {
            "soql_queries": usage_percent(self.soql_queries, self.soql_queries_limit),
            "query_rows": usage_percent(self.query_rows, self.query_rows_limit),
            "cpu_time": usage_percent(self.cpu_time, self.cpu_time_limit),
            "heap_size": usage_percent(self.heap_size, self.heap_size_limit),
            "dml_statements": usage_percent(self.dml_statements, self.dml_statements_limit),
            "dml_rows": usage_percent(self.dml_rows, self.dml_rows_limit),
            "callouts": usage_percent(self.callouts, self.callouts_limit),
        }

    def max_percent(self) -> float:
        return max(self.percentages().values())

    def tier(self) -> LimitTier:
        """Tier of the most heavily used counter."""
        return percent_tier(self.max_percent())


class ExceptionSeverity(str, Enum):
    HANDLED = "Handled"
    WARNING = "Warning"
    UNHANDLED = "Unhandled"
    FATAL = "Fatal"


@dataclass
class ExceptionRecord:
    """An exception node with its inferred severity."""

    severity: ExceptionSeverity
    node: ExecutionNode
    message: str
    exception_type: str = ""
    line_number: int = 0

    @property
    def is_failure(self) -> bool:
        return self.severity in (ExceptionSeverity.UNHANDLED, ExceptionSeverity.FATAL)


@dataclass
class MethodStatistics:
    """Timing statistics for a method or code unit."""

    method_name: str
    call_count: int = 0
    total_duration_ms: float = 0.0
    min_duration_ms: float = 0.0
    max_duration_ms: float = 0.0

    @property
    def average_duration_ms(self) -> float:
        return self.total_duration_ms / self.call_count if self.call_count else 0.0


class RiskLevel(str, Enum):
    SAFE = "Safe"
    MODERATE = "Moderate"
    WARNING = "Warning"
    CRITICAL = "Critical"


@dataclass
class LoopMethodPattern:
    """A method called often enough to contribute estimated stack frames."""

    method_name: str
    call_count: int
    frames_per_call: int  # Heuristic estimate, not measured

    @property
    def total_frames(self) -> int:
        return self.call_count * self.frames_per_call


@dataclass
class StackDepthAnalysis:
    max_depth: int = 0
    method_at_max_depth: str = ""
    loop_patterns: list[LoopMethodPattern] = field(default_factory=list)
    debug_overhead_frames: int = 0
    estimated_total_frames: int = 0
    risk_level: RiskLevel = RiskLevel.SAFE


@dataclass
class DuplicateQuery:
    """SOQL executions that share one normalized shape."""

    shape: str
    execution_count: int
    example_query: str
    total_rows: int = 0
    total_duration_ms: float = 0.0


@dataclass
class TraceAnalysis:
    """Complete analysis of one debug log."""

    log_id: str
    line_count: int = 0
    root_node: ExecutionNode | None = None
    entry_point: str = ""
    log_user: str = ""
    duration_ms: float = 0.0
    wall_clock_ms: float = 0.0
    database_operations: list[DatabaseOperation] = field(default_factory=list)
    callouts: list[CalloutOperation] = field(default_factory=list)
    limit_snapshots: list[GovernorLimitSnapshot] = field(default_factory=list)
    namespace_limit_snapshots: list[GovernorLimitSnapshot] = field(default_factory=list)
    exceptions: list[ExceptionRecord] = field(default_factory=list)
    method_stats: dict[str, MethodStatistics] = field(default_factory=dict)
    stack_depth: StackDepthAnalysis = field(default_factory=StackDepthAnalysis)
    duplicate_queries: list[DuplicateQuery] = field(default_factory=list)
    transaction_failed: bool = False
    is_log_truncated: bool = False
    summary: str = ""
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @property
    def last_limit_snapshot(self) -> GovernorLimitSnapshot | None:
        return self.limit_snapshots[-1] if self.limit_snapshots else None

    @property
    def soql_operations(self) -> list[DatabaseOperation]:
        return [op for op in self.database_operations if op.kind == OperationKind.SOQL]

    @property
    def dml_operations(self) -> list[DatabaseOperation]:
        return [op for op in self.database_operations if op.kind == OperationKind.DML]

    @property
    def custom_metadata_query_count(self) -> int:
        return sum(1 for op in self.soql_operations if op.is_custom_metadata)

    @property
    def regular_soql_count(self) -> int:
        return len(self.soql_operations) - self.custom_metadata_query_count

    @property
    def errors(self) -> list[ExceptionRecord]:
        """Exceptions that failed the transaction."""
        return [e for e in self.exceptions if e.is_failure]

    @property
    def handled_exceptions(self) -> list[ExceptionRecord]:
        return [e for e in self.exceptions if e.severity == ExceptionSeverity.HANDLED]
