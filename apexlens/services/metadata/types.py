"""Types produced by the fast metadata scanner."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum


class ExecutionContext(str, Enum):
    """Broad reason a trace was produced."""

    INTERACTIVE = "Interactive"
    BATCH = "Batch"
    INTEGRATION = "Integration"
    SCHEDULED = "Scheduled"
    ASYNC = "Async"
    UNKNOWN = "Unknown"


@dataclass
class TraceMetadata:
    """Lightweight per-file summary, built without an execution tree."""

    file_path: str = ""
    log_id: str = ""
    user_id: str = ""
    user_name: str = ""
    timestamp: datetime = datetime.min
    duration_ms: float = 0.0
    code_unit_name: str = ""
    method_name: str = ""
    soql_queries: int = 0
    query_rows: int = 0
    dml_statements: int = 0
    dml_rows: int = 0
    cpu_time: int = 0
    heap_size: int = 0
    has_errors: bool = False
    record_id: str = ""
    context: ExecutionContext = ExecutionContext.UNKNOWN

    @property
    def end_time(self) -> datetime:
        return self.timestamp + timedelta(milliseconds=self.duration_ms)
