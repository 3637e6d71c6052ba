"""Types for correlated transaction groups."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from apexlens.services.metadata.types import ExecutionContext, TraceMetadata


class PhaseType(str, Enum):
    BACKEND = "Backend"
    FRONTEND = "Frontend"


@dataclass
class LogPhase:
    """A sub-interval of a group attributed to backend or frontend work."""

    name: str
    type: PhaseType
    logs: list[TraceMetadata]
    start_time: datetime
    end_time: datetime
    duration_ms: float  # Sum of member durations, not end - start
    has_async_operations: bool = False
    is_sequential_loading: bool = False
    parallel_savings_ms: float = 0.0
    gap_to_next_phase_ms: float = 0.0


@dataclass
class TransactionGroup:
    """Logs inferred to belong to one end-to-end user action."""

    start_time: datetime
    end_time: datetime
    user_id: str
    user_name: str
    record_id: str
    logs: list[TraceMetadata]
    is_standalone: bool = False
    total_duration_ms: float = 0.0
    phases: list[LogPhase] = field(default_factory=list)
    reentry_patterns: dict[str, int] = field(default_factory=dict)
    total_reentry_count: int = 0
    has_mixed_contexts: bool = False
    primary_context: ExecutionContext = ExecutionContext.UNKNOWN
    total_soql_queries: int = 0
    total_query_rows: int = 0
    total_dml_statements: int = 0
    total_dml_rows: int = 0
    total_cpu_time: int = 0
    max_heap_size: int = 0
    error_count: int = 0
    slowest_operation: str = "Unknown"
    recommendations: list[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.logs)

    def phase(self, phase_type: PhaseType) -> LogPhase | None:
        """First phase of the given type, if present."""
        return next((p for p in self.phases if p.type == phase_type), None)
