"""Synthetic debug log builder for tests.

Produces grammar-valid log text with a controllable clock, so tests can state
durations in milliseconds instead of hand-writing timestamps.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from apexlens.services.metadata.types import ExecutionContext, TraceMetadata

DEFAULT_HEADER = "64.0 APEX_CODE,DEBUG;APEX_PROFILING,INFO;DB,INFO;SYSTEM,DEBUG"
BASE_TICKS = 1_000


class LogBuilder:
    """Append events at a moving clock, then `build()` the text."""

    def __init__(self, start: str = "10:00:00.000", header: str | None = DEFAULT_HEADER) -> None:
        hours, minutes, rest = start.split(":")
        seconds, millis = rest.split(".")
        self._start = timedelta(
            hours=int(hours), minutes=int(minutes), seconds=int(seconds), milliseconds=int(millis)
        )
        self._now_ms = 0.0
        self._lines: list[str] = [header] if header else []

    # ── clock ────────────────────────────────────────────────

    def advance(self, ms: float) -> LogBuilder:
        self._now_ms += ms
        return self

    def _stamp(self) -> str:
        moment = self._start + timedelta(milliseconds=self._now_ms)
        total_ms = int(round(moment / timedelta(milliseconds=1))) % (24 * 3600 * 1000)
        hours, rem = divmod(total_ms, 3600 * 1000)
        minutes, rem = divmod(rem, 60 * 1000)
        seconds, millis = divmod(rem, 1000)
        ticks = BASE_TICKS + int(self._now_ms * 1_000_000)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d} ({ticks})"

    # ── raw ──────────────────────────────────────────────────

    def event(self, event_type: str, *fields: str) -> LogBuilder:
        line = f"{self._stamp()}|{event_type}"
        if fields:
            line += "|" + "|".join(fields)
        self._lines.append(line)
        return self

    def raw(self, text: str) -> LogBuilder:
        self._lines.append(text)
        return self

    # ── events ───────────────────────────────────────────────

    def user_info(self, user_id: str = "0055g00000AbCdE", name: str = "jane@example.com") -> LogBuilder:
        return self.event("USER_INFO", "[EXTERNAL]", user_id, name, "(GMT-08:00) Pacific Standard Time", "GMT-08:00")

    def execution_started(self) -> LogBuilder:
        return self.event("EXECUTION_STARTED")

    def execution_finished(self) -> LogBuilder:
        return self.event("EXECUTION_FINISHED")

    def code_unit_started(self, name: str, unit_id: str = "01q5g000000abcd") -> LogBuilder:
        return self.event("CODE_UNIT_STARTED", "[EXTERNAL]", unit_id, name)

    def code_unit_finished(self, name: str) -> LogBuilder:
        return self.event("CODE_UNIT_FINISHED", name)

    def method_entry(self, name: str, line: int = 10) -> LogBuilder:
        return self.event("METHOD_ENTRY", f"[{line}]", "01p5g000000abcd", name)

    def method_exit(self, name: str, line: int = 10) -> LogBuilder:
        return self.event("METHOD_EXIT", f"[{line}]", "01p5g000000abcd", name)

    def constructor_entry(self, name: str) -> LogBuilder:
        return self.event("CONSTRUCTOR_ENTRY", "[1]", "01p5g000000abcd", "<init>()", name)

    def constructor_exit(self, name: str) -> LogBuilder:
        return self.event("CONSTRUCTOR_EXIT", "[1]", "01p5g000000abcd", "<init>()", name)

    def statement(self, line: int = 12) -> LogBuilder:
        return self.event("STATEMENT_EXECUTE", f"[{line}]")

    def user_debug(self, message: str, level: str = "DEBUG") -> LogBuilder:
        return self.event("USER_DEBUG", "[15]", level, message)

    def soql(self, query: str, rows: int = 1, duration_ms: float = 2.0) -> LogBuilder:
        self.event("SOQL_EXECUTE_BEGIN", "[20]", "Aggregations:0", query)
        self.advance(duration_ms)
        return self.event("SOQL_EXECUTE_END", "[20]", f"Rows:{rows}")

    def dml(self, op: str = "Insert", object_type: str = "Account", rows: int = 1, duration_ms: float = 5.0) -> LogBuilder:
        self.event("DML_BEGIN", "[30]", f"Op:{op}", f"Type:{object_type}", f"Rows:{rows}")
        self.advance(duration_ms)
        return self.event("DML_END", "[30]")

    def callout(self, endpoint: str, status_code: int = 200, duration_ms: float = 100.0) -> LogBuilder:
        self.event("CALLOUT_REQUEST", "[40]", f"System.HttpRequest[Endpoint={endpoint}, Method=GET]")
        self.advance(duration_ms)
        status = "OK" if status_code < 400 else "Error"
        return self.event("CALLOUT_RESPONSE", "[40]", f"System.HttpResponse[Status={status}, StatusCode={status_code}]")

    def exception(self, text: str = "System.NullPointerException: Attempt to de-reference a null object") -> LogBuilder:
        return self.event("EXCEPTION_THROWN", "[50]", text)

    def fatal(self, text: str = "System.NullPointerException: Attempt to de-reference a null object") -> LogBuilder:
        return self.event("FATAL_ERROR", text)

    def limits(
        self,
        namespace: str = "(default)",
        soql: int = 0,
        query_rows: int = 0,
        dml: int = 0,
        dml_rows: int = 0,
        cpu: int = 0,
        heap: int = 0,
        callouts: int = 0,
    ) -> LogBuilder:
        self.event("CUMULATIVE_LIMIT_USAGE")
        self.event("LIMIT_USAGE_FOR_NS", namespace, "")
        self.raw(f"  Number of SOQL queries: {soql} out of 100")
        self.raw(f"  Number of query rows: {query_rows} out of 50000")
        self.raw("  Number of SOSL queries: 0 out of 20")
        self.raw(f"  Number of DML statements: {dml} out of 150")
        self.raw(f"  Number of DML rows: {dml_rows} out of 10000")
        self.raw(f"  Maximum CPU time: {cpu} out of 10000")
        self.raw(f"  Maximum heap size: {heap} out of 6000000")
        self.raw(f"  Number of callouts: {callouts} out of 100")
        return self.event("CUMULATIVE_LIMIT_USAGE_END")

    def build(self) -> str:
        return "\n".join(self._lines) + "\n"


def make_metadata(**overrides: object) -> TraceMetadata:
    """A TraceMetadata with sensible defaults for grouping tests."""
    base = datetime.combine(date(2026, 1, 15), datetime.min.time()) + timedelta(hours=10)
    offset_s = float(overrides.pop("offset_s", 0.0))  # type: ignore[arg-type]
    fields: dict[str, object] = {
        "file_path": "",
        "log_id": "07L000000000001",
        "user_id": "0055g00000AbCdE",
        "user_name": "jane@example.com",
        "timestamp": base + timedelta(seconds=offset_s),
        "duration_ms": 100.0,
        "code_unit_name": "",
        "method_name": "",
        "context": ExecutionContext.UNKNOWN,
    }
    fields.update(overrides)
    return TraceMetadata(**fields)  # type: ignore[arg-type]
